"""
Scope Registry

In-memory lookup of live scopes by id, used by the routes to deliver view
events and to stream view commands. Scopes registered with a TTL expire
once they have not been rendered or reached by a request for that long;
expired scopes are swept whenever a scope is registered.
"""

import logging
import threading
import time
from typing import Dict, Optional, TYPE_CHECKING

from .errors import UnknownScopeError

if TYPE_CHECKING:
    from .scope import Scope

logger = logging.getLogger(__name__)

_now = time.monotonic

# seconds between sweeps triggered by register()
CLEANUP_INTERVAL = 60


class ScopeRepo:
    """
    In-memory scope registry (Singleton).

    Scopes stay registered until they are removed (``Scope.close``) or,
    when registered with a TTL, until they expire.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the registry (only once)."""
        if not self._initialized:
            self._scopes: Dict[str, 'Scope'] = {}
            self._expiry: Dict[str, float] = {}
            self._lock = threading.Lock()
            self._next_cleanup = 0.0
            ScopeRepo._initialized = True

    def __len__(self) -> int:
        return len(self._scopes)

    def __contains__(self, scope_id: str) -> bool:
        return self.exists(scope_id)

    def register(self, scope: 'Scope', ttl: Optional[int] = None) -> None:
        """Register (or re-register) ``scope``, restarting its TTL."""
        with self._lock:
            self._scopes[scope.id] = scope
            if ttl:
                self._expiry[scope.id] = _now() + ttl
            else:
                self._expiry.pop(scope.id, None)
            sweep = _now() >= self._next_cleanup
        if sweep:
            self.cleanup_expired()

    def touch(self, scope_id: str, ttl: Optional[int]) -> None:
        """Push back the expiry of a scope that is still in use."""
        with self._lock:
            if ttl and scope_id in self._expiry:
                self._expiry[scope_id] = _now() + ttl

    def get(self, scope_id: str) -> 'Scope':
        with self._lock:
            if self._expired(scope_id):
                self._drop(scope_id)
            scope = self._scopes.get(scope_id)
        if scope is None:
            raise UnknownScopeError(f"No scope registered under {scope_id!r}")
        return scope

    def exists(self, scope_id: str) -> bool:
        try:
            self.get(scope_id)
        except UnknownScopeError:
            return False
        return True

    def remove(self, scope_id: str) -> bool:
        with self._lock:
            existed = scope_id in self._scopes
            self._drop(scope_id)
        return existed

    def cleanup_expired(self) -> int:
        """Drop expired scopes; returns how many were removed."""
        with self._lock:
            expired = [key for key in self._expiry if self._expired(key)]
            for key in expired:
                self._drop(key)
            self._next_cleanup = _now() + CLEANUP_INTERVAL
        if expired:
            logger.debug(f"Expired {len(expired)} scopes")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._scopes.clear()
            self._expiry.clear()
            self._next_cleanup = 0.0

    def _expired(self, scope_id: str) -> bool:
        return scope_id in self._expiry and _now() > self._expiry[scope_id]

    def _drop(self, scope_id: str) -> None:
        self._scopes.pop(scope_id, None)
        self._expiry.pop(scope_id, None)
