"""
Database Models - SQLAlchemy ORM models for the persistent backend.

Tables:
- pool_lines: one row per allocatable line; ascending id is pool order
- user_accounts: user identity plus the embedded QuotaRecord columns
- system_settings: single row (id=1) with the lock and contribution flags
- allocation_logs: bounded activity log, newest = highest seq
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PoolLine(Base):
    """
    A single line of pool inventory.

    Lines are consumed in ascending id order, so the autoincrement id is
    the FIFO position.
    """
    __tablename__ = "pool_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pool = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_pool_lines_pool_id", "pool", "id"),
    )


class UserAccountRow(Base):
    """Stored user account with its quota counters."""
    __tablename__ = "user_accounts"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False, default="")
    role = Column(String(20), nullable=False, default="user")
    status = Column(String(20), nullable=False, default="active")

    daily_limit = Column(Integer, nullable=False, default=100)
    max_per_request = Column(Integer, nullable=False, default=500)
    used = Column(Integer, nullable=False, default=0)
    used_pool1 = Column(Integer, nullable=False, default=0)
    used_pool2 = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class SystemSettingsRow(Base):
    """Global settings, always stored as the row with id=1."""
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True)
    locked = Column(Boolean, nullable=False, default=False)
    allow_contribution = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class AllocationLogRow(Base):
    """One allocation event. `seq` orders entries as committed."""
    __tablename__ = "allocation_logs"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(String(64), nullable=False, unique=True)
    user_id = Column(String(64), nullable=False)
    user_name = Column(String(200), nullable=False)
    count1 = Column(Integer, nullable=False)
    count2 = Column(Integer, nullable=False)
    total_generated = Column(Integer, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
