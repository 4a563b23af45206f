"""
StreamSpawn - turns live stream notifications into in-game effects.
"""

__version__ = "0.3.0"
