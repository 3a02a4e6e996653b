"""Momentum progress engine: XP, streaks, badges, wins and challenges"""

__version__ = "0.1.0"
