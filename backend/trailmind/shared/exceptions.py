"""
Exception hierarchy.

The live engine never raises these during ingestion; they are used at the
edges (checkpoint file helpers, CLI input handling).
"""


class TrailMindError(Exception):
    """Base class for all package errors."""


class CheckpointError(TrailMindError):
    """A checkpoint document could not be read, decoded or written."""


class ReplayError(TrailMindError):
    """A recorded track could not be loaded for replay."""
