"""Core module - config, database, exceptions."""

from plantlog.core.config import get_settings, Settings
from plantlog.core.database import Database
from plantlog.core.exceptions import (
    AppException,
    NotFoundException,
    BadRequestException,
    ServiceUnavailableException,
    StorageError,
    IncompleteScheduleError,
)

__all__ = [
    "get_settings",
    "Settings",
    "Database",
    "AppException",
    "NotFoundException",
    "BadRequestException",
    "ServiceUnavailableException",
    "StorageError",
    "IncompleteScheduleError",
]
