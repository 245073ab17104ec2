"""
Configuration module for environment variable validation and type-safe config.

Region and credential profile are resolved here once and passed explicitly
to the samples; nothing below reads the environment on its own.
"""
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _int_from_env(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}") from None
    if not minimum <= value <= maximum:
        raise ValueError(
            f"{name} must be between {minimum} and {maximum}, got: {value}"
        )
    return value


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got: {raw}")


@dataclass(frozen=True)
class Config:
    """Type-safe configuration object with validated environment variables."""

    aws_region: str = "us-east-1"
    aws_profile: Optional[str] = None
    log_level: str = "INFO"
    bucket_prefix: str = "my-first-s3-bucket-"
    object_key: str = "MyObjectKey"
    list_prefix: str = "My"
    queue_name: str = "MyQueue"
    unique_queue_name: bool = True
    message_body: str = "This is my message text."
    max_messages: int = 1
    wait_seconds: int = 0

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create Config instance from environment variables.

        Raises:
            ValueError: If environment variables are present but invalid.
        """
        aws_region = os.environ.get("AWS_REGION", "us-east-1").strip()
        if not aws_region:
            raise ValueError("AWS_REGION must not be empty")

        aws_profile = os.environ.get("AWS_PROFILE") or None

        log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {VALID_LOG_LEVELS}, got: {log_level}"
            )

        object_key = os.environ.get("SAMPLE_OBJECT_KEY", "MyObjectKey")
        if not object_key:
            raise ValueError("SAMPLE_OBJECT_KEY must not be empty")

        queue_name = os.environ.get("SAMPLE_QUEUE_NAME", "MyQueue")
        if not queue_name:
            raise ValueError("SAMPLE_QUEUE_NAME must not be empty")

        return cls(
            aws_region=aws_region,
            aws_profile=aws_profile,
            log_level=log_level,
            bucket_prefix=os.environ.get(
                "SAMPLE_BUCKET_PREFIX", "my-first-s3-bucket-"
            ),
            object_key=object_key,
            list_prefix=os.environ.get("SAMPLE_LIST_PREFIX", "My"),
            queue_name=queue_name,
            unique_queue_name=_bool_from_env("SAMPLE_UNIQUE_QUEUE_NAME", True),
            message_body=os.environ.get(
                "SAMPLE_MESSAGE_BODY", "This is my message text."
            ),
            max_messages=_int_from_env("SQS_MAX_MESSAGES", 1, 1, 10),
            wait_seconds=_int_from_env("SQS_WAIT_SECONDS", 0, 0, 20),
        )

    def with_overrides(self, **overrides: Any) -> "Config":
        """
        Return a copy with the given fields replaced.

        ``None`` values are ignored so unset command-line flags keep the
        environment value.

        Raises:
            ValueError: If an override names an unknown field.
        """
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown config fields: {sorted(unknown)}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "log_level" in changes:
            changes["log_level"] = changes["log_level"].upper()
            if changes["log_level"] not in VALID_LOG_LEVELS:
                raise ValueError(
                    f"log_level must be one of {VALID_LOG_LEVELS}, "
                    f"got: {changes['log_level']}"
                )
        return replace(self, **changes)


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config: The validated configuration object

    Raises:
        ValueError: If environment variables are invalid.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
