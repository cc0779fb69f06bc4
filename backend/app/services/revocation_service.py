"""Revocation service: revoke a user session and keep cached views consistent.

State machine per session view:

    IDLE -> CONFIRM_PENDING -> EXECUTING -> SUCCEEDED
                 |                  |
                 v                  v
               IDLE        FAILED (attempt result) -> IDLE

The session-list cache entry is invalidated only after the revoke command
has been acknowledged. A failed revoke touches neither cache nor navigation.
"""

import enum
import logging
from typing import Protocol

from app.core.cache import session_list_key
from app.core.management_api import ManagementApiError
from app.core.navigation import Navigator

logger = logging.getLogger("session_console.revocation")


class RevocationState(str, enum.Enum):
    idle = "idle"
    confirm_pending = "confirm_pending"
    executing = "executing"
    succeeded = "succeeded"
    failed = "failed"


class SessionRevoker(Protocol):
    async def revoke_user_session(self, user_id: str, session_id: str) -> None: ...


class CacheInvalidator(Protocol):
    async def invalidate(self, key: str) -> None: ...


class RevocationInProgressError(RuntimeError):
    """Raised when a revocation for the same session is already executing."""


class RevocationCoordinator:
    """Drives one session's revoke flow: confirm, execute, then sync caches and navigate."""

    def __init__(
        self,
        *,
        user_id: str | None,
        session_id: str | None,
        revoker: SessionRevoker,
        cache: CacheInvalidator,
        navigator: Navigator,
    ) -> None:
        self.user_id = user_id
        self.session_id = session_id
        self._revoker = revoker
        self._cache = cache
        self._navigator = navigator
        self.state = RevocationState.idle
        self.is_confirm_open = False
        self.last_error: ManagementApiError | None = None
        self._disposed = False

    @property
    def can_revoke(self) -> bool:
        return bool(self.user_id and self.session_id)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def request_revoke(self) -> bool:
        """Open the confirmation step. Refused when ids are missing or not idle."""
        if not self.can_revoke or self.state != RevocationState.idle:
            return False
        self.state = RevocationState.confirm_pending
        self.is_confirm_open = True
        self.last_error = None
        return True

    def cancel(self) -> None:
        if self.state != RevocationState.confirm_pending:
            return
        self.state = RevocationState.idle
        self.is_confirm_open = False

    async def confirm(self) -> RevocationState:
        """Execute the revoke. Returns the attempt's outcome; no-op unless confirm is pending."""
        if self.state != RevocationState.confirm_pending or not self.can_revoke:
            return self.state

        self.state = RevocationState.executing
        logger.info(
            "revoking session user_id=%s session_id=%s", self.user_id, self.session_id
        )
        try:
            await self._revoker.revoke_user_session(self.user_id, self.session_id)
        except ManagementApiError as exc:
            self.last_error = exc
            self.is_confirm_open = False
            self.state = RevocationState.idle
            logger.warning(
                "session revoke failed user_id=%s session_id=%s status=%d code=%s",
                self.user_id,
                self.session_id,
                exc.status_code,
                exc.code,
            )
            return RevocationState.failed
        except BaseException:
            # Includes cancellation: the flow must be usable again.
            self.is_confirm_open = False
            self.state = RevocationState.idle
            logger.warning(
                "session revoke aborted user_id=%s session_id=%s",
                self.user_id,
                self.session_id,
            )
            raise

        self.state = RevocationState.succeeded
        if not self._disposed:
            self.is_confirm_open = False
        # The list entry is shared across views; refresh it even after teardown.
        await self._cache.invalidate(session_list_key(self.user_id))
        if not self._disposed:
            self._navigator.go_back()
        else:
            logger.info(
                "view disposed before revoke completed session_id=%s", self.session_id
            )
        return RevocationState.succeeded

    def dispose(self) -> None:
        """Tear down the view; later completions skip view-scoped effects."""
        self._disposed = True


class RevocationRegistry:
    """One coordinator per (user_id, session_id) while a revoke is running."""

    def __init__(self) -> None:
        self._active: dict[tuple[str, str], RevocationCoordinator] = {}

    def acquire(
        self,
        *,
        user_id: str,
        session_id: str,
        revoker: SessionRevoker,
        cache: CacheInvalidator,
        navigator: Navigator,
    ) -> RevocationCoordinator:
        key = (user_id, session_id)
        if key in self._active:
            raise RevocationInProgressError(
                f"revocation of session {session_id} is already in progress"
            )
        coordinator = RevocationCoordinator(
            user_id=user_id,
            session_id=session_id,
            revoker=revoker,
            cache=cache,
            navigator=navigator,
        )
        self._active[key] = coordinator
        return coordinator

    def release(self, coordinator: RevocationCoordinator) -> None:
        coordinator.dispose()
        key = (coordinator.user_id, coordinator.session_id)
        if self._active.get(key) is coordinator:
            del self._active[key]

    def is_active(self, user_id: str, session_id: str) -> bool:
        return (user_id, session_id) in self._active


async def revoke_session(
    registry: RevocationRegistry,
    *,
    user_id: str,
    session_id: str,
    revoker: SessionRevoker,
    cache: CacheInvalidator,
    navigator: Navigator,
) -> RevocationCoordinator:
    """Run a confirmed revoke end to end. Raises the upstream error on failure."""
    coordinator = registry.acquire(
        user_id=user_id,
        session_id=session_id,
        revoker=revoker,
        cache=cache,
        navigator=navigator,
    )
    try:
        coordinator.request_revoke()
        outcome = await coordinator.confirm()
    finally:
        registry.release(coordinator)

    if outcome == RevocationState.failed and coordinator.last_error is not None:
        raise coordinator.last_error
    return coordinator
