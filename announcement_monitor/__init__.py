"""Concurrent monitor for cryptocurrency exchange listing announcements"""

__version__ = "0.1.0"
