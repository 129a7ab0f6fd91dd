"""
System Control - Global lock and contribution switch.
"""
from datameq.allocation.permissions import require_admin
from datameq.allocation.types import SystemSettings, UserAccount
from datameq.core.logging_config import LoggerMixin
from datameq.storage.base import StorageBackend


class SystemControl(LoggerMixin):
    """Reads and changes the global SystemSettings."""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def settings(self) -> SystemSettings:
        return self.backend.load_system_settings()

    def is_locked(self) -> bool:
        return self.backend.load_system_settings().locked

    def set_lock(self, actor: UserAccount, locked: bool) -> SystemSettings:
        require_admin(actor, "lock or unlock the system")

        def apply(settings: SystemSettings) -> None:
            settings.locked = locked

        updated = self.backend.update_system_settings(apply)
        self.logger.warning(f"System {'LOCKED' if locked else 'UNLOCKED'} by {actor.id}")
        return updated

    def set_allow_contribution(self, actor: UserAccount, allowed: bool) -> SystemSettings:
        require_admin(actor, "change contribution settings")

        def apply(settings: SystemSettings) -> None:
            settings.allow_contribution = allowed

        updated = self.backend.update_system_settings(apply)
        self.logger.info(f"User contribution {'enabled' if allowed else 'disabled'} by {actor.id}")
        return updated
