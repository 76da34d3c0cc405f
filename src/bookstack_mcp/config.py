from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_UPLOAD_TIMEOUT_SECONDS = 120.0


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable BookStack instance."""


@dataclass(frozen=True)
class BookStackConfig:
    base_url: str
    token_id: str
    token_secret: str
    enable_write: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    upload_timeout_seconds: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS


def validate_base_url(raw: str) -> str:
    """Check scheme/host and strip trailing slashes."""
    raw = (raw or "").strip()
    parsed = urlparse(raw)
    if parsed.scheme not in ("http", "https"):
        raise ConfigError(
            f"BOOKSTACK_BASE_URL must use http or https scheme, got: {raw!r}"
        )
    if not parsed.netloc:
        raise ConfigError(f"BOOKSTACK_BASE_URL is not a valid URL: {raw!r}")
    return raw.rstrip("/")


def _required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigError(f"{name} environment variable is required")
    return value


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() == "true"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got: {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero")
    return value


def load_env_config(*, use_dotenv: bool = True) -> BookStackConfig:
    """Load BookStack connection settings from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    return BookStackConfig(
        base_url=validate_base_url(_required("BOOKSTACK_BASE_URL")),
        token_id=_required("BOOKSTACK_TOKEN_ID"),
        token_secret=_required("BOOKSTACK_TOKEN_SECRET"),
        enable_write=_env_flag("BOOKSTACK_ENABLE_WRITE"),
        timeout_seconds=_env_float("BOOKSTACK_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
    )


__all__ = [
    "BookStackConfig",
    "ConfigError",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_UPLOAD_TIMEOUT_SECONDS",
    "load_env_config",
    "validate_base_url",
]
