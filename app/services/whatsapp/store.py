"""
Session Store

Process-wide table of active conversations keyed by phone number.

All reads and writes for one phone happen inside `lock(phone)`, so two
near-simultaneous messages from the same number are handled one after
the other while unrelated phones never wait for each other. The store
methods themselves do not take the lock; the dispatcher and the sweeper
hold it around a whole read-modify-write.

Backends:
    - InMemorySessionStore: dict + reference-counted asyncio locks
    - RedisSessionStore: JSON values with native TTL + Redis locks

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable, Optional

import redis.asyncio as aioredis
from redis.exceptions import LockError, LockNotOwnedError, RedisError

from app.services.whatsapp.session import Session

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseSessionStore(ABC):
    """
    Abstract session store.

    Attributes:
        ttl: Idle time after which a session expires
        clock: Returns the current aware datetime
    """

    def __init__(self, ttl: timedelta = timedelta(minutes=30), clock: Clock = utcnow):
        self.ttl = ttl
        self.clock = clock

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    def new_expiry(self) -> datetime:
        return self.clock() + self.ttl

    @abstractmethod
    def lock(self, phone: str):
        """Async context manager giving exclusive access to `phone`'s session."""
        pass

    @abstractmethod
    async def get(self, phone: str) -> Optional[Session]:
        """Return the live session for `phone`, or None when absent or expired."""
        pass

    @abstractmethod
    async def put(self, phone: str, session: Session) -> None:
        pass

    @abstractmethod
    async def delete(self, phone: str) -> None:
        pass

    async def touch(self, phone: str) -> Optional[Session]:
        """Push the session's expiry to now + ttl and return the updated session."""
        session = await self.get(phone)
        if session is None:
            return None
        session = session.with_expiry(self.new_expiry())
        await self.put(phone, session)
        return session

    @abstractmethod
    async def sweep(self) -> int:
        """Remove every expired session; returns how many were removed."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of live (unexpired) sessions."""
        pass

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass


# =============================================================================
# IN-MEMORY BACKEND
# =============================================================================

class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class InMemorySessionStore(BaseSessionStore):
    """
    Single-process store.

    A lock entry lives only while some task holds or waits for it, so the
    lock table never outgrows the number of in-flight messages.
    """

    def __init__(self, ttl: timedelta = timedelta(minutes=30), clock: Clock = utcnow):
        super().__init__(ttl=ttl, clock=clock)
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, _KeyLock] = {}

    @property
    def provider_name(self) -> str:
        return "memory"

    @asynccontextmanager
    async def lock(self, phone: str) -> AsyncIterator[None]:
        entry = self._locks.get(phone)
        if entry is None:
            entry = self._locks[phone] = _KeyLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._locks.pop(phone, None)

    def is_locked(self, phone: str) -> bool:
        entry = self._locks.get(phone)
        return entry is not None and entry.lock.locked()

    async def get(self, phone: str) -> Optional[Session]:
        session = self._sessions.get(phone)
        if session is None:
            return None
        if session.is_expired(self.clock()):
            del self._sessions[phone]
            return None
        return session

    async def put(self, phone: str, session: Session) -> None:
        self._sessions[phone] = session

    async def delete(self, phone: str) -> None:
        self._sessions.pop(phone, None)

    async def sweep(self) -> int:
        now = self.clock()
        expired = [phone for phone, s in self._sessions.items() if s.is_expired(now)]

        removed = 0
        for phone in expired:
            async with self.lock(phone):
                # Re-check: a message may have refreshed it while we waited
                session = self._sessions.get(phone)
                if session is not None and session.is_expired(self.clock()):
                    del self._sessions[phone]
                    removed += 1
        return removed

    async def count(self) -> int:
        now = self.clock()
        return sum(1 for s in self._sessions.values() if not s.is_expired(now))


# =============================================================================
# REDIS BACKEND
# =============================================================================

class RedisSessionStore(BaseSessionStore):
    """
    Store shared by several worker processes.

    Sessions are JSON documents whose key TTL follows expires_at, so
    Redis evicts idle conversations itself and sweep() has nothing to do.
    """

    KEY_PREFIX = "whatsapp:session:"
    LOCK_PREFIX = "whatsapp:session-lock:"

    def __init__(
        self,
        client: aioredis.Redis,
        ttl: timedelta = timedelta(minutes=30),
        lock_timeout: float = 30.0,
        clock: Clock = utcnow,
    ):
        super().__init__(ttl=ttl, clock=clock)
        self.client = client
        self.lock_timeout = lock_timeout

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisSessionStore":
        return cls(aioredis.Redis.from_url(url, decode_responses=True), **kwargs)

    @property
    def provider_name(self) -> str:
        return "redis"

    def _key(self, phone: str) -> str:
        return f"{self.KEY_PREFIX}{phone}"

    @asynccontextmanager
    async def lock(self, phone: str) -> AsyncIterator[None]:
        """
        Per-phone Redis lock with a lease of `lock_timeout` seconds.

        The lease must be longer than anything done under the lock (see
        Settings.validate_lock_lease). If it still runs out, the work done
        under it stands and the expiry is only logged on release.
        """
        redis_lock = self.client.lock(
            f"{self.LOCK_PREFIX}{phone}",
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_timeout,
        )
        if not await redis_lock.acquire():
            raise LockError(f"Session of {phone} still locked after {self.lock_timeout}s")
        try:
            yield
        finally:
            try:
                await redis_lock.release()
            except LockNotOwnedError:
                logger.warning(
                    f"⚠️ Session lock of {phone} expired before release "
                    f"(lease {self.lock_timeout}s)"
                )

    async def get(self, phone: str) -> Optional[Session]:
        raw = await self.client.get(self._key(phone))
        if raw is None:
            return None
        session = Session.model_validate_json(raw)
        if session.is_expired(self.clock()):
            await self.delete(phone)
            return None
        return session

    async def put(self, phone: str, session: Session) -> None:
        remaining_ms = int((session.expires_at - self.clock()).total_seconds() * 1000)
        if remaining_ms <= 0:
            await self.delete(phone)
            return
        await self.client.set(self._key(phone), session.model_dump_json(), px=remaining_ms)

    async def delete(self, phone: str) -> None:
        await self.client.delete(self._key(phone))

    async def sweep(self) -> int:
        return 0

    async def count(self) -> int:
        total = 0
        async for _ in self.client.scan_iter(match=f"{self.KEY_PREFIX}*"):
            total += 1
        return total

    async def health_check(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
