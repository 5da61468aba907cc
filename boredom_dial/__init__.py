"""
Boredom Dial - a real-time group mood relay over WebSockets.

This package provides a server that keeps per-room participant values in memory,
aggregates them, and pushes the aggregate to every connection in the room.
"""

__version__ = "0.1.0"
