"""Deploy marker module."""

from .marker import Marker

__all__ = ["Marker"]
