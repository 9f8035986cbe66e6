"""
Edge services (file formats, external sources).
"""

from .gpx_replay import GPXReplayService

__all__ = ["GPXReplayService"]
