import base64
import binascii
import json
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError


GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
SHEETS_API_URL = "https://sheets.googleapis.com/v4"
SHEETS_READONLY_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_TOKEN_LIFETIME_SECONDS = 60
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
# Google rejects assertions that expire more than an hour after they are issued.
MAX_TOKEN_LIFETIME_SECONDS = 3600


@dataclass(frozen=True)
class ServiceAccountCredentials:
    client_email: str
    private_key: str

    def __repr__(self) -> str:
        return f"ServiceAccountCredentials(client_email={self.client_email!r}, private_key=<hidden>)"


@dataclass(frozen=True)
class Settings:
    credentials: ServiceAccountCredentials
    spreadsheet_id: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    token_lifetime_seconds: int = DEFAULT_TOKEN_LIFETIME_SECONDS
    token_url: str = GOOGLE_TOKEN_URL
    sheets_api_url: str = SHEETS_API_URL
    log_level: str = "INFO"


def decode_service_account(blob: str) -> ServiceAccountCredentials:
    """
    Decode the base64 service-account JSON kept in GOOGLE_SERVICE_ACCOUNT.

    Error messages name the variable but never include its contents.
    """
    try:
        info = json.loads(base64.b64decode(blob, validate=True))
    except (binascii.Error, ValueError) as e:
        raise ConfigError("GOOGLE_SERVICE_ACCOUNT is not base64-encoded JSON") from e
    if not isinstance(info, dict):
        raise ConfigError("GOOGLE_SERVICE_ACCOUNT must decode to a JSON object")

    missing = [key for key in ("client_email", "private_key") if not info.get(key)]
    if missing:
        raise ConfigError(f"GOOGLE_SERVICE_ACCOUNT is missing {', '.join(missing)}")
    return ServiceAccountCredentials(
        client_email=info["client_email"],
        private_key=info["private_key"],
    )


def _positive_number(environ: Mapping[str, str], name: str, default, cast):
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number") from e
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number")
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero")
    return value


def _log_level(environ: Mapping[str, str]) -> str:
    level = environ.get("LOG_LEVEL", "").strip().upper() or "INFO"
    if level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    if environ is None:
        environ = os.environ

    blob = environ.get("GOOGLE_SERVICE_ACCOUNT", "").strip()
    if not blob:
        raise ConfigError("GOOGLE_SERVICE_ACCOUNT is not set")
    spreadsheet_id = environ.get("SPREADSHEET_ID", "").strip()
    if not spreadsheet_id:
        raise ConfigError("SPREADSHEET_ID is not set")

    lifetime = _positive_number(
        environ, "ACCESS_TOKEN_LIFETIME_SECONDS", DEFAULT_TOKEN_LIFETIME_SECONDS, int
    )
    return Settings(
        credentials=decode_service_account(blob),
        spreadsheet_id=spreadsheet_id,
        timeout_seconds=_positive_number(
            environ, "UPSTREAM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, float
        ),
        token_lifetime_seconds=min(lifetime, MAX_TOKEN_LIFETIME_SECONDS),
        token_url=environ.get("GOOGLE_TOKEN_URL", GOOGLE_TOKEN_URL),
        sheets_api_url=environ.get("SHEETS_API_URL", SHEETS_API_URL).rstrip("/"),
        log_level=_log_level(environ),
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
