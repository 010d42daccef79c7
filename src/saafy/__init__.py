"""
Saafy - session-seeded music discovery and playback.
"""

__version__ = "0.1.0"
