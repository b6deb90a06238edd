"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class MatchingConfig(BaseSettings):
    """Template matching and result cache configuration."""

    model_config = {"env_prefix": "QRSTICKERS_MATCH_"}

    cache_ttl_seconds: int = 1800  # 30 minutes
    cache_backend: Literal["memory", "redis"] = "memory"


class DynamoDBConfig(BaseSettings):
    """DynamoDB template catalog configuration."""

    model_config = {"env_prefix": "QRSTICKERS_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "QRSTICKERS_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    decode_responses: bool = True


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "QRSTICKERS_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    catalog_backend: Literal["memory", "dynamodb"] = "memory"

    matching: MatchingConfig = MatchingConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
