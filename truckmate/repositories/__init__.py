"""
Persistence layer for TruckMate.
"""
from truckmate.repositories.base import (
    ProfileStore,
    VerificationRequestStore,
    UserStore,
    UnitOfWork,
)
from truckmate.repositories.sql import SqlUnitOfWork

__all__ = [
    "ProfileStore",
    "VerificationRequestStore",
    "UserStore",
    "UnitOfWork",
    "SqlUnitOfWork",
]
