"""Environment-driven configuration loader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .models import ConfigError


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration values."""

    json_keyfile: Path
    cloud_project: str
    cloud_dns_zone: str
    dns_domain: str | None
    default_ttl: int
    prune_missing: bool
    dry_run: bool
    nomad_addr: str
    nomad_token: str | None
    sync_interval: int
    http_timeout: float
    metrics_port: int | None
    log_level: str


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Return a boolean parsed from a string."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _parse_int(name: str, default: str | None) -> int | None:
    """Return an integer environment value, or None when unset."""
    raw = os.getenv(name, default)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc


def _parse_domain(value: str | None) -> str | None:
    """Return a zone domain with a trailing dot."""
    if not value:
        return None
    stripped = value.strip()
    return stripped if stripped.endswith(".") else f"{stripped}."


def load_config() -> AppConfig:
    """Load configuration values from the environment (and .env)."""
    load_dotenv(find_dotenv(usecwd=True))
    default_ttl = _parse_int("DEFAULT_TTL", "300")
    if default_ttl is None or default_ttl < 0:
        raise ConfigError("DEFAULT_TTL must be a non-negative integer.")
    sync_interval = _parse_int("SYNC_INTERVAL", "60")
    if sync_interval is None:
        sync_interval = 60

    try:
        http_timeout = float(os.getenv("HTTP_TIMEOUT", "30"))
    except ValueError as exc:
        raise ConfigError("HTTP_TIMEOUT must be a number.") from exc

    config = AppConfig(
        json_keyfile=Path(os.getenv("JSON_KEYFILE", "key.json")),
        cloud_project=os.getenv("CLOUD_PROJECT", "myproject"),
        cloud_dns_zone=os.getenv("CLOUD_DNS_ZONE", "myzone"),
        dns_domain=_parse_domain(os.getenv("DNS_DOMAIN")),
        default_ttl=default_ttl,
        prune_missing=_parse_bool(os.getenv("PRUNE_MISSING", "false")),
        dry_run=_parse_bool(os.getenv("DRY_RUN", "false")),
        nomad_addr=os.getenv("NOMAD_ADDR", "http://127.0.0.1:4646"),
        nomad_token=os.getenv("NOMAD_TOKEN") or None,
        sync_interval=sync_interval,
        http_timeout=http_timeout,
        metrics_port=_parse_int("METRICS_PORT", None),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
    return config
