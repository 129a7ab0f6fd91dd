"""
Database module - SQLAlchemy access layer for the persistent backend.

This module handles:
- Database connection management
- ORM models for pools, users, settings and activity
- Schema creation
"""
from datameq.database.connection import DatabaseConnection, get_database, reset_database
from datameq.database.models import (
    Base,
    PoolLine,
    UserAccountRow,
    SystemSettingsRow,
    AllocationLogRow,
)
from datameq.database.init_db import init_tables, drop_tables

__all__ = [
    # Connection
    "DatabaseConnection",
    "get_database",
    "reset_database",
    # Models
    "Base",
    "PoolLine",
    "UserAccountRow",
    "SystemSettingsRow",
    "AllocationLogRow",
    # Init
    "init_tables",
    "drop_tables",
]
