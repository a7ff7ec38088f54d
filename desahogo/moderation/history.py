"""In-memory per-user moderation history with bounded growth.

Records are created lazily and evicted least-recently-used once
``max_users`` is exceeded, or after ``ttl_seconds`` without activity.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Optional

from desahogo.moderation.models import (
    FlagType,
    ModerationAction,
    ModerationResult,
    UserModerationHistory,
)

DEFAULT_MAX_USERS = 10_000


class UserLock:
    """Handle on one user's lock, counted as in use until it is exited.

    A store never discards a lock that has outstanding handles, so every
    holder of a handle for a user serializes on the same underlying lock.
    """

    def __init__(self, store: HistoryStore, user_id: str, lock: threading.Lock) -> None:
        self._store = store
        self.user_id = user_id
        self.lock = lock

    def __enter__(self) -> UserLock:
        self.lock.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self.lock.release()
        self._store._release(self.user_id)


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class HistoryStore:
    """Owns every :class:`UserModerationHistory` for one moderator."""

    def __init__(self, max_users: int = DEFAULT_MAX_USERS, ttl_seconds: Optional[float] = None) -> None:
        if max_users < 1:
            raise ValueError("max_users must be at least 1")
        self.max_users = max_users
        self.ttl_seconds = ttl_seconds
        self._records: OrderedDict[str, UserModerationHistory] = OrderedDict()
        self._user_locks: dict[str, _LockEntry] = {}
        self._lock = threading.Lock()

    # -- access --------------------------------------------------------------

    def lock_for(self, user_id: str) -> UserLock:
        """Handle serializing read-detect-update cycles for *user_id*.

        Use it as a context manager; the lock is kept alive until the
        handle is exited.
        """
        with self._lock:
            entry = self._user_locks.get(user_id)
            if entry is None:
                entry = self._user_locks[user_id] = _LockEntry()
            entry.users += 1
            return UserLock(self, user_id, entry.lock)

    def get(self, user_id: str) -> Optional[UserModerationHistory]:
        with self._lock:
            self._expire(datetime.now(timezone.utc))
            return self._records.get(user_id)

    def clear(self, user_id: str) -> None:
        with self._lock:
            self._records.pop(user_id, None)
            self._drop_lock(user_id)

    def values(self) -> list[UserModerationHistory]:
        with self._lock:
            self._expire(datetime.now(timezone.utc))
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._records

    # -- update --------------------------------------------------------------

    def record(self, user_id: str, content: str, result: ModerationResult) -> UserModerationHistory:
        """Fold one verdict into the user's history and return it."""
        now = datetime.now(timezone.utc)
        with self._lock:
            self._expire(now)
            history = self._records.get(user_id)
            if history is None:
                history = self._records[user_id] = UserModerationHistory(user_id=user_id)
            self._records.move_to_end(user_id)
            history.last_seen_at = now

            if result.is_approved:
                history.recent_content.append(content)

            if result.flags:
                history.total_flags += len(result.flags)
                history.last_flagged_at = now
                if any(f.type == FlagType.SPAM for f in result.flags):
                    history.recent_spam_flags += 1

            if result.suggested_action == ModerationAction.WARN_USER:
                history.warning_count += 1
            elif result.suggested_action == ModerationAction.SUSPEND_USER:
                # Not produced by the current action rules.
                history.suspension_count += 1

            while len(self._records) > self.max_users:
                evicted, _ = self._records.popitem(last=False)
                self._drop_lock(evicted)
            return history

    # -- eviction ------------------------------------------------------------

    def _expire(self, now: datetime) -> None:
        if self.ttl_seconds is None:
            return
        cutoff = now - timedelta(seconds=self.ttl_seconds)
        # Records are kept in last-activity order, oldest first.
        while self._records:
            user_id, history = next(iter(self._records.items()))
            if history.last_seen_at is None or history.last_seen_at >= cutoff:
                break
            del self._records[user_id]
            self._drop_lock(user_id)

    def _release(self, user_id: str) -> None:
        with self._lock:
            entry = self._user_locks.get(user_id)
            if entry is None:
                return
            entry.users -= 1
            if user_id not in self._records:
                self._drop_lock(user_id)

    def _drop_lock(self, user_id: str) -> None:
        """Forget a user's lock unless a handle for it is still out."""
        entry = self._user_locks.get(user_id)
        if entry is not None and entry.users <= 0:
            del self._user_locks[user_id]
