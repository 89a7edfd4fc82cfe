"""
Database module for TruckMate.
"""
from truckmate.db.database import (
    Base,
    engine,
    async_session_maker,
    get_async_session,
)

__all__ = [
    "Base",
    "engine",
    "async_session_maker",
    "get_async_session",
]
