"""
Core package for TruckMate.
"""
from truckmate.core.config import settings, get_settings

__all__ = ["settings", "get_settings"]
