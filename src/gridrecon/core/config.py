"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class MatchingConfig(BaseSettings):
    """Similarity scoring weights and confidence tier thresholds."""

    model_config = {"env_prefix": "GRIDRECON_MATCH_"}

    confirmed_threshold: float = Field(default=0.60, ge=0.0, le=1.0)
    low_confidence_threshold: float = Field(default=0.40, ge=0.0, le=1.0)
    edit_weight: float = Field(default=0.5, ge=0.0)
    affix_weight: float = Field(default=0.5, ge=0.0)
    prefix_weight: float = Field(default=0.1, ge=0.0, le=0.25)  # Jaro-Winkler prefix scale

    @model_validator(mode="after")
    def _check_ranges(self) -> "MatchingConfig":
        if self.low_confidence_threshold > self.confirmed_threshold:
            raise ValueError("low_confidence_threshold must not exceed confirmed_threshold")
        if self.edit_weight + self.affix_weight <= 0:
            raise ValueError("edit_weight and affix_weight must not both be zero")
        return self


class ReconcileConfig(BaseSettings):
    """Field comparison and commit defaults for the reconciler."""

    model_config = {"env_prefix": "GRIDRECON_RECONCILE_"}

    numeric_tolerance: Optional[float] = None  # None = strict string comparison
    strip_units: bool = True
    default_prune_removed: bool = True


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "GRIDRECON_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    mapping_table: str = "gridrecon-mapping-config"


class RedisConfig(BaseSettings):
    """Redis commit-lock configuration."""

    model_config = {"env_prefix": "GRIDRECON_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    lock_timeout: float = 60.0
    lock_blocking_timeout: float = 5.0


class S3Config(BaseSettings):
    """S3 snapshot storage configuration."""

    model_config = {"env_prefix": "GRIDRECON_S3_"}

    bucket: str = "gridrecon-project-state"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    snapshot_prefix: str = "projects/"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "GRIDRECON_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    backend: Literal["memory", "aws"] = "memory"
    catalog_path: Optional[str] = None  # JSON catalog; built-in catalog when unset

    matching: MatchingConfig = MatchingConfig()
    reconcile: ReconcileConfig = ReconcileConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
