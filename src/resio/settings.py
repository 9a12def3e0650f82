"""Settings for resource access, populated from environment variables."""

import logging
import os
from functools import lru_cache
from typing import Optional, Union

from pydantic import BaseModel, Field, validator

ENV_S3_ENDPOINT_URL = "S3_HOST"
"""The environment variable holding the S3 URL to use."""
ENV_HTTP_TIMEOUT = "RESIO_HTTP_TIMEOUT"
"""The environment variable holding the HTTP timeout, in seconds."""
ENV_HTTP_USER_AGENT = "RESIO_HTTP_USER_AGENT"
"""The environment variable holding the user agent sent with HTTP requests."""
ENV_LOG_LEVEL = "RESIO_LOG_LEVEL"
"""The environment variable holding the log level for the package logger."""


class ResourceSettings(BaseModel):
    """Settings shared by the resource implementations."""

    class Config:  # pylint: disable=too-few-public-methods
        """`pydantic` configuration options."""

        validate_assignment = True

    s3_endpoint_url: Optional[str] = None
    """The S3 endpoint URL. If not set, `boto3` chooses the endpoint."""
    http_timeout: float = Field(default=30.0, gt=0)
    """The timeout for HTTP requests, in seconds."""
    http_user_agent: str = "resio"
    """The user agent sent with HTTP requests."""
    log_level: int = logging.INFO
    """The level for the package logger."""

    @validator("log_level", pre=True)
    # pylint: disable=E0213
    def _validate_log_level(cls, level: Union[str, int]) -> int:
        """Accept log level names as well as numeric levels."""
        if isinstance(level, int):
            return level
        if level.isdigit():
            return int(level)
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            raise ValueError(f"Unknown log level {level!r}")
        return numeric_level

    @classmethod
    def from_env(cls) -> "ResourceSettings":
        """Build the settings from environment variables, using defaults for
        any which are unset.

        """
        env_mapping = {
            "s3_endpoint_url": ENV_S3_ENDPOINT_URL,
            "http_timeout": ENV_HTTP_TIMEOUT,
            "http_user_agent": ENV_HTTP_USER_AGENT,
            "log_level": ENV_LOG_LEVEL,
        }
        values = {}
        for field_name, env_var in env_mapping.items():
            value = os.environ.get(env_var)
            if value:
                values[field_name] = value
        return cls(**values)


@lru_cache(maxsize=None)
def get_settings() -> ResourceSettings:
    """Get the settings for the current process. These are read from the
    environment once; call `get_settings.cache_clear()` to re-read them.

    """
    return ResourceSettings.from_env()
