from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_SECRET_KEY = "dev-not-secure-change-me"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class RuntimeSettings:
    env: str
    debug: bool
    secret_key: str
    allowed_hosts: tuple[str, ...]
    log_level: str
    api_version: str
    cors_origin: str
    db_profile: str
    sqlite_path: str
    db_name: str
    db_user: str
    db_password: str
    db_host: str
    db_port: str
    rate_limit_enabled: bool
    rate_limit_window_seconds: int
    rate_limit_max: int
    atomic_donation_writes: bool


TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def _env(name: str, default: str = "") -> str:
    return str(os.getenv(name, default)).strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name, "1" if default else "0").lower()
    return raw in TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    raw = _env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def get_runtime_settings() -> RuntimeSettings:
    env = _env("DT_ENV", "dev").lower()
    profile = _env("DT_DB_PROFILE", "sqlite").lower()
    if profile not in {"sqlite", "postgres"}:
        profile = "sqlite"

    log_level = _env("DT_LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        log_level = "INFO"

    hosts = tuple(host.strip() for host in _env("DT_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if host.strip())

    return RuntimeSettings(
        env=env,
        debug=_env_bool("DT_DEBUG", env == "dev"),
        secret_key=_env("DT_SECRET_KEY", DEFAULT_SECRET_KEY),
        allowed_hosts=hosts,
        log_level=log_level,
        api_version=_env("DT_API_VERSION", "v1") or "v1",
        cors_origin=_env("DT_CORS_ORIGIN", "http://localhost:3000"),
        db_profile=profile,
        sqlite_path=_env("DT_SQLITE_PATH", ""),
        db_name=_env("DT_DB_NAME", "donation_tracker"),
        db_user=_env("DT_DB_USER", ""),
        db_password=_env("DT_DB_PASSWORD", ""),
        db_host=_env("DT_DB_HOST", "localhost"),
        db_port=_env("DT_DB_PORT", "5432"),
        rate_limit_enabled=_env_bool("DT_RATE_LIMIT_ENABLED", env != "test"),
        rate_limit_window_seconds=max(1, _env_int("DT_RATE_LIMIT_WINDOW_SECONDS", 900)),
        rate_limit_max=max(1, _env_int("DT_RATE_LIMIT_MAX", 100)),
        atomic_donation_writes=_env_bool("DT_ATOMIC_DONATION_WRITES", False),
    )


def validate_runtime_settings(settings: RuntimeSettings) -> list[str]:
    issues: list[str] = []
    if settings.env == "prod":
        if not settings.secret_key or settings.secret_key == DEFAULT_SECRET_KEY:
            issues.append("DT_SECRET_KEY must be set to a non-default value in prod")
        if settings.debug:
            issues.append("DT_DEBUG must be disabled in prod")

    if settings.db_profile == "postgres":
        if not settings.db_name:
            issues.append("DT_DB_NAME is required for postgres profile")
        if not settings.db_user:
            issues.append("DT_DB_USER is required for postgres profile")
        if not settings.db_host:
            issues.append("DT_DB_HOST is required for postgres profile")

    if not settings.cors_origin:
        issues.append("DT_CORS_ORIGIN should name the allowed browser origin")

    return issues
