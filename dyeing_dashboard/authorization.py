"""
Capability checks for mutating actions (save, delete, upload, settings).

A principal is whatever the caller knows about the requester: a passkey
string for the shared-secret gate, a user name for role grants.
"""

import hmac
import logging
from typing import Any, Iterable

from .config import ADMIN_PASSKEY
from .errors import AuthorizationError

logger = logging.getLogger(__name__)

ACTIONS = frozenset({"save", "delete", "upload", "settings"})


class Authorizer:
    """Base gate. Subclasses implement allows()."""

    def allows(self, principal: Any, action: str) -> bool:
        raise NotImplementedError

    def require(self, principal: Any, action: str) -> None:
        """Raise AuthorizationError unless principal may perform action."""
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action!r}")
        if not self.allows(principal, action):
            logger.warning("Denied %s action", action)
            raise AuthorizationError(f"Not authorized to {action}")


class PasskeyAuthorizer(Authorizer):
    """One shared admin passkey unlocks every action.

    An empty configured passkey denies everything rather than accepting an
    empty submission.
    """

    def __init__(self, passkey: str = ADMIN_PASSKEY):
        self._passkey = passkey or ""

    def allows(self, principal: Any, action: str) -> bool:
        if not self._passkey or not isinstance(principal, str):
            return False
        return hmac.compare_digest(principal.encode(), self._passkey.encode())


class RoleAuthorizer(Authorizer):
    """Per-user action grants, e.g. {"planner": {"save", "upload"}}."""

    def __init__(self, grants: dict[str, Iterable[str]]):
        self._grants = {user: frozenset(actions) for user, actions in grants.items()}
        unknown = set().union(*self._grants.values()) - ACTIONS if self._grants else set()
        if unknown:
            raise ValueError(f"Unknown actions in grants: {sorted(unknown)}")

    def allows(self, principal: Any, action: str) -> bool:
        return action in self._grants.get(principal, frozenset())


class AllowAll(Authorizer):
    """No gate; for read-only tooling and the synthetic pipeline."""

    def allows(self, principal: Any, action: str) -> bool:
        return True
