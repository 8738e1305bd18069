"""Environment-driven configuration for the landing service."""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Mapping

from dotenv import load_dotenv

from landing_service.shared.contact.errors import ConfigurationError


TRUE_VALUES = {"1", "true", "yes", "on"}
NOTIFY_TRANSPORTS = ("smtp", "mail")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """Runtime settings. Built by load_settings() from the environment."""
    host: str = "127.0.0.1"
    port: int = 3000
    submissions_file: Path = Path("data") / "submissions.json"
    assets_dir: Path = Path("public")
    landing_page_path: Optional[Path] = None

    # Contact form rate limiting: 3 messages per 15 minutes per IP
    rate_limit_max_requests: int = 3
    rate_limit_window_seconds: float = 15 * 60
    rate_limit_sweep_seconds: float = 60 * 60

    notify_enabled: bool = False
    notify_transport: str = "smtp"
    notify_timeout_seconds: float = 30.0
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_secure: bool = False
    contact_to: Optional[str] = None
    contact_from: Optional[str] = None
    mail_command: str = "mail"

    log_level: str = "INFO"

    @property
    def recipient(self) -> Optional[str]:
        return self.contact_to or self.smtp_user

    @property
    def sender(self) -> Optional[str]:
        return self.contact_from or self.smtp_user


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in TRUE_VALUES


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    When no mapping is given, variables from a local .env file are loaded
    into os.environ first (existing variables win).

    Raises:
        ConfigurationError if a value is malformed
    """
    if env is None:
        load_dotenv()
        env = os.environ

    data_dir = Path(env.get("DATA_DIR") or "data")
    submissions_file = env.get("SUBMISSIONS_FILE")
    landing_page = env.get("LANDING_PAGE_PATH")

    max_requests = _get_int(env, "RATE_LIMIT_MAX_REQUESTS", 3)
    if max_requests < 1:
        raise ConfigurationError("RATE_LIMIT_MAX_REQUESTS must be at least 1")

    transport = (env.get("NOTIFY_TRANSPORT") or "smtp").strip().lower()
    if transport not in NOTIFY_TRANSPORTS:
        raise ConfigurationError(
            f"NOTIFY_TRANSPORT must be one of {', '.join(NOTIFY_TRANSPORTS)}, got {transport!r}"
        )

    return Settings(
        host=env.get("HOST") or "127.0.0.1",
        port=_get_int(env, "PORT", 3000),
        submissions_file=Path(submissions_file) if submissions_file else data_dir / "submissions.json",
        assets_dir=Path(env.get("ASSETS_DIR") or "public"),
        landing_page_path=Path(landing_page) if landing_page else None,
        rate_limit_max_requests=max_requests,
        rate_limit_window_seconds=_get_float(env, "RATE_LIMIT_WINDOW_SECONDS", 15 * 60),
        rate_limit_sweep_seconds=_get_float(env, "RATE_LIMIT_SWEEP_SECONDS", 60 * 60),
        notify_enabled=_get_bool(env, "NOTIFY_ENABLED", False),
        notify_transport=transport,
        notify_timeout_seconds=_get_float(env, "NOTIFY_TIMEOUT_SECONDS", 30.0),
        smtp_host=env.get("SMTP_HOST") or "smtp.gmail.com",
        smtp_port=_get_int(env, "SMTP_PORT", 587),
        smtp_user=env.get("SMTP_USER") or None,
        smtp_password=env.get("SMTP_PASSWORD") or None,
        smtp_secure=_get_bool(env, "SMTP_SECURE", False),
        contact_to=env.get("CONTACT_TO") or None,
        contact_from=env.get("CONTACT_FROM") or None,
        mail_command=env.get("MAIL_COMMAND") or "mail",
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )


def validate_notification_settings(settings: Settings) -> None:
    """
    Fail fast when notifications are enabled but cannot work.

    Raises:
        ConfigurationError if required credentials or addresses are missing
    """
    if not settings.notify_enabled:
        return

    if settings.notify_transport == "smtp":
        missing = [
            name for name, value in (
                ("SMTP_USER", settings.smtp_user),
                ("SMTP_PASSWORD", settings.smtp_password),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Notifications are enabled but {', '.join(missing)} not configured"
            )
    elif not settings.contact_to:
        raise ConfigurationError("Notifications via mail command require CONTACT_TO")

    if not settings.recipient:
        raise ConfigurationError("Notifications are enabled but no recipient is configured")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
