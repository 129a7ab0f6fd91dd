"""
Persistent Backend - Database-backed authoritative store.

Stores pools, users, settings and the activity log through SQLAlchemy so
that every process pointed at the same database shares one inventory.

Atomicity:
- take_prefixes() reads the requested prefix of every pool with
  SELECT ... FOR UPDATE, checks the lengths and deletes the rows in one
  transaction. SQLite ignores FOR UPDATE; there every transaction starts
  with BEGIN IMMEDIATE (see database.connection), so the read and the
  delete already hold the database write lock.
- On every dialect the delete must remove exactly the rows that were
  read. A short row count raises InventoryChangedConcurrently, and any
  refusal raised inside the transaction rolls it back.
- When a quota charge is passed in, the user row is locked and charged in
  the same transaction, so a take and its charge commit or fail together.
- Within a process, the same LockRegistry as the in-memory backend keeps
  request threads from contending on the database.

Store failures are reported as StoreUnavailable; the core does not retry.
"""
from contextlib import AbstractContextManager, contextmanager, nullcontext
from datetime import timezone
from typing import Callable, Dict, Iterator, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from datameq.allocation.types import (
    LogEntry,
    QuotaRecord,
    SystemSettings,
    UserAccount,
    UserRole,
    UserStatus,
)
from datameq.core.exceptions import InventoryChangedConcurrently, StoreUnavailable, UserNotFound
from datameq.core.logging_config import get_logger
from datameq.database.connection import DatabaseConnection, get_database
from datameq.database.init_db import init_tables
from datameq.database.models import AllocationLogRow, PoolLine, SystemSettingsRow, UserAccountRow
from datameq.storage.base import StorageBackend
from datameq.storage.locks import LockRegistry

logger = get_logger(__name__)

SETTINGS_ROW_ID = 1


class DatabaseBackend(StorageBackend):
    """
    SQLAlchemy-backed store.

    Example:
        >>> backend = DatabaseBackend(DatabaseConnection("sqlite:///datameq.db"))
        >>> backend.append_lines("data2", ["x@y.com"])
        1
    """

    name = "persistent"

    def __init__(self, db: Optional[DatabaseConnection] = None, create_tables: bool = True):
        self.db = db or get_database()
        self.locks = LockRegistry()
        if create_tables:
            init_tables(self.db)
        logger.info(f"DatabaseBackend initialized (sqlite={self.db.is_sqlite})")

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """One session/transaction; SQLAlchemy failures become StoreUnavailable."""
        try:
            with self.db.get_session() as session:
                yield session
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Storage backend error: {e.__class__.__name__}") from e

    # ---------------------------------------------------------------
    # Pools
    # ---------------------------------------------------------------

    def pool_length(self, pool: str) -> int:
        with self._transaction() as session:
            return self._count(session, pool)

    def append_lines(self, pool: str, lines: List[str]) -> int:
        with self.locks.pool(pool), self._transaction() as session:
            session.add_all([PoolLine(pool=pool, content=line) for line in lines])
            session.flush()
            return self._count(session, pool)

    def clear_pool(self, pool: str) -> int:
        with self.locks.pool(pool), self._transaction() as session:
            result = session.execute(delete(PoolLine).where(PoolLine.pool == pool))
            return result.rowcount or 0

    def take_prefixes(
        self,
        counts: Dict[str, int],
        user_id: Optional[str] = None,
        charge: Optional[Callable[[QuotaRecord], None]] = None
    ) -> Dict[str, List[str]]:
        user_scope = self.locks.user(user_id) if charge is not None else nullcontext()
        with user_scope, self.locks.pools_locked(counts), self._transaction() as session:
            account = None
            if charge is not None:
                account = self._locked_account(session, user_id)
                quota = _read_quota(account)
                charge(quota)

            picked: Dict[str, List[PoolLine]] = {}
            for pool, n in counts.items():
                picked[pool] = list(
                    session.execute(
                        select(PoolLine)
                        .where(PoolLine.pool == pool)
                        .order_by(PoolLine.id)
                        .limit(n)
                        .with_for_update()
                    ).scalars().all()
                ) if n > 0 else []

            if any(len(picked[pool]) < n for pool, n in counts.items()):
                available = {pool: self._count(session, pool) for pool in counts}
                raise InventoryChangedConcurrently(requested=counts, available=available)

            taken = {pool: [row.content for row in rows] for pool, rows in picked.items()}

            # Another transaction may have deleted some of the picked rows
            # between our read and this delete; only a full match may commit
            removed: Dict[str, int] = {pool: 0 for pool in counts}
            for pool, rows in picked.items():
                if not rows:
                    continue
                ids = [row.id for row in rows]
                result = session.execute(
                    delete(PoolLine)
                    .where(PoolLine.id.in_(ids))
                    .execution_options(synchronize_session=False)
                )
                removed[pool] = result.rowcount
                if result.rowcount != len(ids):
                    available = {
                        name: self._count(session, name) + removed[name] for name in counts
                    }
                    logger.warning(
                        f"{pool}: {len(ids) - result.rowcount} picked lines already gone, rolling back"
                    )
                    raise InventoryChangedConcurrently(requested=counts, available=available)

            if account is not None:
                _write_quota(account, quota)
            return taken

    @staticmethod
    def _count(session: Session, pool: str) -> int:
        return session.execute(
            select(func.count(PoolLine.id)).where(PoolLine.pool == pool)
        ).scalar_one()

    @staticmethod
    def _locked_account(session: Session, user_id: str) -> UserAccountRow:
        row = session.execute(
            select(UserAccountRow).where(UserAccountRow.id == user_id).with_for_update()
        ).scalar_one_or_none()
        if row is None:
            raise UserNotFound(user_id)
        return row

    # ---------------------------------------------------------------
    # Users & quotas
    # ---------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[UserAccount]:
        with self._transaction() as session:
            row = session.get(UserAccountRow, user_id)
            return _to_account(row) if row else None

    def list_users(self) -> List[UserAccount]:
        with self._transaction() as session:
            rows = session.execute(
                select(UserAccountRow).order_by(UserAccountRow.created_at, UserAccountRow.id)
            ).scalars().all()
            return [_to_account(row) for row in rows]

    def save_user(self, user: UserAccount) -> None:
        with self.locks.user(user.id), self._transaction() as session:
            row = session.get(UserAccountRow, user.id)
            if row is None:
                row = UserAccountRow(id=user.id, created_at=user.created_at)
                session.add(row)
            row.name = user.name
            row.email = user.email
            row.role = user.role.value
            row.status = user.status.value
            _write_quota(row, user.quota)

    def delete_user(self, user_id: str) -> bool:
        with self.locks.user(user_id), self._transaction() as session:
            result = session.execute(delete(UserAccountRow).where(UserAccountRow.id == user_id))
            removed = bool(result.rowcount)
        if removed:
            self.locks.forget_user(user_id)
        return removed

    def update_quota(
        self,
        user_id: str,
        mutate: Callable[[QuotaRecord], None]
    ) -> QuotaRecord:
        with self.locks.user(user_id), self._transaction() as session:
            row = self._locked_account(session, user_id)
            quota = _read_quota(row)
            mutate(quota)
            _write_quota(row, quota)
            return quota

    def user_lock(self, user_id: str) -> AbstractContextManager:
        return self.locks.user(user_id)

    # ---------------------------------------------------------------
    # System settings
    # ---------------------------------------------------------------

    def load_system_settings(self) -> SystemSettings:
        with self._transaction() as session:
            row = session.get(SystemSettingsRow, SETTINGS_ROW_ID)
            if row is None:
                return SystemSettings()
            return SystemSettings(locked=row.locked, allow_contribution=row.allow_contribution)

    def update_system_settings(
        self,
        mutate: Callable[[SystemSettings], None]
    ) -> SystemSettings:
        with self.locks.settings, self._transaction() as session:
            row = session.execute(
                select(SystemSettingsRow)
                .where(SystemSettingsRow.id == SETTINGS_ROW_ID)
                .with_for_update()
            ).scalar_one_or_none()
            if row is None:
                row = SystemSettingsRow(id=SETTINGS_ROW_ID, locked=False, allow_contribution=False)
                session.add(row)
            settings = SystemSettings(locked=row.locked, allow_contribution=row.allow_contribution)
            mutate(settings)
            row.locked = settings.locked
            row.allow_contribution = settings.allow_contribution
            return settings

    # ---------------------------------------------------------------
    # Activity log
    # ---------------------------------------------------------------

    def append_activity(self, entry: LogEntry, cap: int) -> None:
        with self.locks.activity, self._transaction() as session:
            session.add(AllocationLogRow(
                entry_id=entry.id,
                user_id=entry.user_id,
                user_name=entry.user_name,
                count1=entry.count1,
                count2=entry.count2,
                total_generated=entry.total_generated,
                timestamp=entry.timestamp,
            ))
            session.flush()

            # Drop everything older than the newest `cap` entries
            cutoff = session.execute(
                select(AllocationLogRow.seq)
                .order_by(AllocationLogRow.seq.desc())
                .offset(cap)
                .limit(1)
            ).scalar_one_or_none()
            if cutoff is not None:
                session.execute(delete(AllocationLogRow).where(AllocationLogRow.seq <= cutoff))

    def recent_activity(self) -> List[LogEntry]:
        with self._transaction() as session:
            rows = session.execute(
                select(AllocationLogRow).order_by(AllocationLogRow.seq.desc())
            ).scalars().all()
            return [
                LogEntry(
                    id=row.entry_id,
                    user_id=row.user_id,
                    user_name=row.user_name,
                    count1=row.count1,
                    count2=row.count2,
                    total_generated=row.total_generated,
                    timestamp=_aware(row.timestamp),
                )
                for row in rows
            ]

    # ---------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------

    def check_health(self) -> bool:
        return self.db.check_connection()

    def close(self) -> None:
        self.db.close()


def _aware(value):
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _read_quota(row: UserAccountRow) -> QuotaRecord:
    return QuotaRecord(
        daily_limit=row.daily_limit,
        max_per_request=row.max_per_request,
        used=row.used,
        used_pool1=row.used_pool1,
        used_pool2=row.used_pool2,
    )


def _write_quota(row: UserAccountRow, quota: QuotaRecord) -> None:
    row.daily_limit = quota.daily_limit
    row.max_per_request = quota.max_per_request
    row.used = quota.used
    row.used_pool1 = quota.used_pool1
    row.used_pool2 = quota.used_pool2


def _to_account(row: UserAccountRow) -> UserAccount:
    return UserAccount(
        id=row.id,
        name=row.name,
        email=row.email or "",
        role=UserRole(row.role),
        status=UserStatus(row.status),
        quota=_read_quota(row),
        created_at=_aware(row.created_at),
    )
