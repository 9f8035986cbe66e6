"""
TrailMind engine.

Hike tracking and physiological load engine: turns a live stream of
location, heart-rate, cadence and battery samples into trail segments,
a fatigue/energy score and a safety status, with crash-safe checkpoints.
"""

__version__ = "0.1.0"
