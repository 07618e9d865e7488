"""Defines Enum classes used in the package."""

__all__ = ["Endpoint", "Theme"]

from enum import Enum


class Endpoint(Enum):
    """Enum for the YouTube Data API endpoints used by the package."""

    SEARCH = "search"
    """Search for channels by name or handle"""

    CHANNELS = "channels"
    """Look up channels by ID"""

    PLAYLIST_ITEMS = "playlistItems"
    """List the items of a playlist"""

    VIDEOS = "videos"
    """Look up the details and statistics of videos"""


class Theme(Enum):
    """Enum for the color theme of the feed."""

    DARK = "dark"
    """Dark theme"""

    LIGHT = "light"
    """Light theme"""
