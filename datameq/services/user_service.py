"""
User Directory - Account records consumed by the allocation core.

Creates accounts with the configured default quota, resolves ids for the
API layer and seeds the administrator account at startup. Authentication
is not handled here; the directory only answers "who is this id".
"""
import uuid
from typing import List, Optional

from datameq.allocation.permissions import require_admin
from datameq.allocation.types import UNLIMITED, QuotaRecord, UserAccount, UserRole, UserStatus
from datameq.core.config import Settings, get_settings
from datameq.core.exceptions import InvalidRequest, UserNotFound
from datameq.core.logging_config import get_logger
from datameq.core.validators import validate_user_id
from datameq.storage.base import StorageBackend

logger = get_logger(__name__)


class UserDirectory:
    """
    Lookup and lifecycle of user accounts.

    Example:
        >>> users = UserDirectory(backend)
        >>> alice = users.create_user(admin, name="Alice Johnson")
        >>> alice.quota.daily_limit
        100
    """

    def __init__(self, backend: StorageBackend, settings: Optional[Settings] = None):
        self.backend = backend
        self.settings = settings or get_settings()

    def default_quota(self, role: UserRole) -> QuotaRecord:
        if role == UserRole.ADMIN:
            return QuotaRecord(
                daily_limit=UNLIMITED,
                max_per_request=self.settings.default_max_per_request,
            )
        return QuotaRecord(
            daily_limit=self.settings.default_daily_limit,
            max_per_request=self.settings.default_max_per_request,
        )

    def create_user(
        self,
        actor: UserAccount,
        name: str,
        role: UserRole = UserRole.USER,
        email: str = "",
        user_id: Optional[str] = None
    ) -> UserAccount:
        """
        Create an account with default quota and zero usage.

        Raises:
            PermissionDenied: actor is not an administrator
            InvalidRequest: bad id or name, or the id is already taken
        """
        require_admin(actor, "create users")
        return self._create(name=name, role=role, email=email, user_id=user_id)

    def _create(
        self,
        name: str,
        role: UserRole,
        email: str = "",
        user_id: Optional[str] = None
    ) -> UserAccount:
        user_id = validate_user_id(user_id or f"user-{uuid.uuid4().hex[:12]}")
        name = (name or "").strip()
        if not name:
            raise InvalidRequest("Name cannot be empty", field="name")
        if self.backend.get_user(user_id) is not None:
            raise InvalidRequest(f"User id already exists: {user_id}", field="user_id")

        user = UserAccount(
            id=user_id,
            name=name,
            role=role,
            email=email.strip(),
            quota=self.default_quota(role),
        )
        self.backend.save_user(user)
        logger.info(f"Created user {user_id} ({role.value})")
        return user

    def get_user(self, user_id: str) -> UserAccount:
        user = self.backend.get_user(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    def list_users(self) -> List[UserAccount]:
        return self.backend.list_users()

    def delete_user(self, actor: UserAccount, user_id: str) -> None:
        require_admin(actor, "delete users")
        if actor.id == user_id:
            raise InvalidRequest("Administrators cannot delete their own account", field="user_id")
        if not self.backend.delete_user(user_id):
            raise UserNotFound(user_id)
        logger.warning(f"Deleted user {user_id} (by {actor.id})")

    def set_status(self, actor: UserAccount, user_id: str, status: UserStatus) -> UserAccount:
        require_admin(actor, "change account status")
        with self.backend.user_lock(user_id):
            user = self.get_user(user_id)
            user.status = status
            self.backend.save_user(user)
        logger.info(f"Status of {user_id} changed to {status.value} (by {actor.id})")
        return user

    def seed_defaults(self) -> UserAccount:
        """Ensure the configured administrator account exists."""
        admin = self.backend.get_user(self.settings.admin_user_id)
        if admin is not None:
            return admin
        admin = self._create(
            name=self.settings.admin_name,
            role=UserRole.ADMIN,
            email=self.settings.admin_email,
            user_id=self.settings.admin_user_id,
        )
        logger.info(f"Seeded administrator account {admin.id}")
        return admin
