"""Redis backend implementing ICommitLock with a redis-py lock per project."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import redis
from redis.exceptions import LockError, RedisError

from gridrecon.core.exceptions import CommitConflictError, StoreError

logger = logging.getLogger(__name__)


class RedisCommitLock:
    """Production ICommitLock; the lock key is ``gridrecon:commit:{project_id}``."""

    KEY_PREFIX = "gridrecon:commit:"

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 timeout: float = 60.0, blocking_timeout: float = 5.0) -> None:
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout
        self._client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

    def key_for(self, project_id: str) -> str:
        return f"{self.KEY_PREFIX}{project_id}"

    @contextmanager
    def hold(self, project_id: str) -> Iterator[None]:
        lock = self._client.lock(
            self.key_for(project_id),
            timeout=self._timeout,
            blocking_timeout=self._blocking_timeout,
        )
        try:
            acquired = lock.acquire()
        except RedisError as exc:
            raise StoreError(f"Redis lock failed for project {project_id!r}: {exc}") from exc
        if not acquired:
            raise CommitConflictError(project_id)
        logger.debug("Acquired commit lock %s", self.key_for(project_id))
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                logger.warning("Commit lock for %s expired before release", project_id)
