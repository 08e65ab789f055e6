"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from gridrecon.core.config import AppSettings
from gridrecon.persistence.dynamodb_backend import DynamoDBMappingStore
from gridrecon.persistence.memory_backend import MemoryCommitLock, MemoryMappingStore, MemorySnapshotStore
from gridrecon.persistence.redis_backend import RedisCommitLock
from gridrecon.persistence.s3_backend import S3SnapshotStore


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (mapping_store, snapshot_store, commit_lock).
    """
    if settings is None:
        settings = AppSettings()

    if settings.backend == "memory":
        return MemoryMappingStore(), MemorySnapshotStore(), MemoryCommitLock()

    mapping_store = DynamoDBMappingStore(
        table_name=settings.dynamodb.mapping_table,
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    snapshot_store = S3SnapshotStore(
        bucket=settings.s3.bucket,
        prefix=settings.s3.snapshot_prefix,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    commit_lock = RedisCommitLock(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        timeout=settings.redis.lock_timeout,
        blocking_timeout=settings.redis.lock_blocking_timeout,
    )

    return mapping_store, snapshot_store, commit_lock
