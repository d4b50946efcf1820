"""Centralized configuration management for the Best Goats service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so every importer of :mod:`best_goats.settings` sees the same
# values regardless of import order.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SITE_TITLE = "The Best Goats"
DEFAULT_IMAGE_ORIGIN = "https://storage.googleapis.com/best_goats"
DEFAULT_SESSION_COOKIE_NAME = "user_id"
DEFAULT_SESSION_TOKEN_LENGTH = 30
DEFAULT_SESSION_COOKIE_MAX_AGE_DAYS = 365 * 20
DEFAULT_STORE_TIMEOUT_SECONDS = 5.0

StoreBackend = Literal["redis", "memory"]


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Every knob the request handler needs lives here: where the two key-value
    namespaces are, how the session cookie is shaped, and where image requests
    are proxied to.  Derived values (cookie max-age in seconds, numeric log
    level) are exposed as properties so call sites never repeat the arithmetic.
    """

    _explicit_redis_url: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:  # noqa: D401 - short override explanation
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_redis_url = "redis_url" in normalized_keys
        redis_env = os.getenv("REDIS_URL")
        if redis_env is not None and redis_env.strip():
            self._explicit_redis_url = True

    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        alias="REDIS_URL",
        description="Redis connection string hosting both the catalog and favorites namespaces.",
    )
    store_backend: StoreBackend = Field(
        default="redis",
        alias="STORE_BACKEND",
        description=(
            "Key-value backend. ``memory`` keeps everything in-process and is only"
            " suitable for local development and the test-suite."
        ),
    )
    catalog_namespace: str = Field(
        default="goats",
        alias="CATALOG_NAMESPACE",
        description="Key prefix of the read-only catalog namespace.",
    )
    catalog_key: str = Field(
        default="featured",
        alias="CATALOG_KEY",
        description="Well-known key holding the MessagePack-encoded catalog.",
    )
    favorites_namespace: str = Field(
        default="favorites",
        alias="FAVORITES_NAMESPACE",
        description="Key prefix under which favorites lists are stored per session token.",
    )
    store_timeout_seconds: float = Field(
        default=DEFAULT_STORE_TIMEOUT_SECONDS,
        gt=0,
        alias="STORE_TIMEOUT_SECONDS",
        description="Upper bound for a single key-value store call.",
    )
    session_cookie_name: str = Field(
        default=DEFAULT_SESSION_COOKIE_NAME,
        alias="SESSION_COOKIE_NAME",
    )
    session_cookie_max_age_days: int = Field(
        default=DEFAULT_SESSION_COOKIE_MAX_AGE_DAYS,
        gt=0,
        alias="SESSION_COOKIE_MAX_AGE_DAYS",
    )
    session_token_length: int = Field(
        default=DEFAULT_SESSION_TOKEN_LENGTH,
        ge=16,
        alias="SESSION_TOKEN_LENGTH",
        description="Number of alphanumeric characters in a freshly issued session token.",
    )
    image_origin: str = Field(
        default=DEFAULT_IMAGE_ORIGIN,
        alias="IMAGE_ORIGIN",
        description="External origin that ``/images/*`` requests are forwarded to.",
    )
    image_proxy_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        alias="IMAGE_PROXY_TIMEOUT_SECONDS",
    )
    site_title: str = Field(default=DEFAULT_SITE_TITLE, alias="SITE_TITLE")
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )

    @property
    def session_cookie_max_age_seconds(self) -> int:
        """Return the cookie lifetime expressed in seconds."""

        return self.session_cookie_max_age_days * 24 * 60 * 60

    @property
    def normalized_image_origin(self) -> str:
        """Return ``image_origin`` without a trailing slash."""

        return self.image_origin.strip().rstrip("/")

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset or risky optional configuration."""

        warnings: list[str] = []

        if self.store_backend == "memory":
            warnings.append(
                "STORE_BACKEND=memory - favorites are kept in-process and vanish "
                "on restart (never use this in production)"
            )
        elif not self._explicit_redis_url and self.redis_url == DEFAULT_REDIS_URL:
            warnings.append(
                "REDIS_URL is not set - falling back to redis://localhost:6379/0"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_IMAGE_ORIGIN",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SESSION_COOKIE_MAX_AGE_DAYS",
    "DEFAULT_SESSION_COOKIE_NAME",
    "DEFAULT_SESSION_TOKEN_LENGTH",
    "DEFAULT_SITE_TITLE",
    "DEFAULT_STORE_TIMEOUT_SECONDS",
    "StoreBackend",
    "get_settings",
]
