"""Session management with Redis backend and in-memory fallback."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import redis.asyncio as redis
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from redis.exceptions import RedisError

from config import config

logger = logging.getLogger(__name__)


class InvalidSessionToken(ValueError):
    """Session token has a bad signature or has expired."""


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key or config.security.secret_key)

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify a signed token.

        Args:
            token: The signed token
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The raw session ID if valid, None otherwise
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore(ABC):
    """Key-value store of JSON-compatible session data, keyed by raw session ID."""

    @abstractmethod
    async def get(self, session_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...

    async def exists(self, session_id: str) -> bool:
        return await self.get(session_id) is not None


class InMemorySessionStore(SessionStore):
    """In-memory session store for local development and tests."""

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[dict[str, Any], datetime]] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        data, expiry = entry
        if expiry < datetime.now():
            await self.delete(session_id)
            return None
        return data

    async def set(
        self,
        session_id: str,
        data: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        expiry = datetime.now() + timedelta(seconds=ttl or config.session_ttl)
        self._sessions[session_id] = (data, expiry)

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def cleanup_expired(self) -> int:
        """Remove expired sessions, returning how many were dropped."""
        now = datetime.now()
        expired = [sid for sid, (_, expiry) in self._sessions.items() if expiry < now]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)


class RedisSessionStore(SessionStore):
    """Redis-backed session store."""

    prefix = "casino:session:"

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    async def get(self, session_id: str) -> dict[str, Any] | None:
        data = await self._redis.get(self._key(session_id))
        if data is None:
            return None
        return json.loads(data)

    async def set(
        self,
        session_id: str,
        data: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        await self._redis.setex(self._key(session_id), ttl or config.session_ttl, json.dumps(data))

    async def delete(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))

    async def exists(self, session_id: str) -> bool:
        return await self._redis.exists(self._key(session_id)) > 0


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """
    Get or create the session store.

    Redis is used when enabled and reachable; otherwise sessions live in
    process memory.
    """
    global _session_store

    if _session_store is not None:
        return _session_store

    if config.redis.enabled:
        try:
            redis_client = redis.from_url(config.redis.url)
            await redis_client.ping()
            _session_store = RedisSessionStore(redis_client)
            logger.info("Using Redis session store at %s:%d", config.redis.host, config.redis.port)
            return _session_store
        except (RedisError, OSError) as exc:
            logger.warning("Redis unavailable (%s), using in-memory sessions", exc)

    _session_store = InMemorySessionStore()
    return _session_store


def reset_session_store() -> None:
    """Forget the current store; the next call picks a backend again."""
    global _session_store
    _session_store = None


def extract_session_id(token: str) -> str | None:
    """Raw session ID of a signed token, or None if the token is invalid."""
    return get_session_signer().unsign(token)


async def create_session(data: dict[str, Any] | None = None) -> str:
    """
    Create a session.

    Returns:
        The signed session token handed to the client
    """
    store = await get_session_store()
    session_id = str(uuid4())
    await store.set(session_id, data or {})
    return get_session_signer().sign(session_id)


async def load_session(token: str) -> dict[str, Any] | None:
    """
    Load the data of a signed session token.

    Raises:
        InvalidSessionToken: If the token is forged or expired

    Returns:
        Session data, or None if the session no longer exists
    """
    session_id = extract_session_id(token)
    if session_id is None:
        raise InvalidSessionToken("Invalid or expired session token")
    store = await get_session_store()
    return await store.get(session_id)


async def save_session(token: str, data: dict[str, Any]) -> None:
    """Replace the data of a signed session token."""
    session_id = extract_session_id(token)
    if session_id is None:
        raise InvalidSessionToken("Invalid or expired session token")
    store = await get_session_store()
    await store.set(session_id, data)


async def delete_session(token: str) -> None:
    session_id = extract_session_id(token)
    if session_id is not None:
        store = await get_session_store()
        await store.delete(session_id)
