from datetime import datetime, timedelta, timezone
from typing import Optional

import requests
from jose import JOSEError, jwt

from ..config import SHEETS_READONLY_SCOPE, ServiceAccountCredentials, Settings
from ..errors import UpstreamAuthError
from ..log import get_logger


ALGORITHM = "RS256"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

logger = get_logger("auth")


def create_service_account_assertion(
    credentials: ServiceAccountCredentials,
    audience: str,
    lifetime: timedelta,
    now: Optional[datetime] = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "iss": credentials.client_email,
        "scope": SHEETS_READONLY_SCOPE,
        "aud": audience,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
    }
    try:
        return jwt.encode(claims, credentials.private_key, algorithm=ALGORITHM)
    except (JOSEError, ValueError, TypeError) as e:
        # The key itself never goes into the message.
        raise UpstreamAuthError(f"could not sign assertion for {credentials.client_email}: {type(e).__name__}") from e


def fetch_access_token(settings: Settings, session: Optional[requests.Session] = None) -> str:
    """
    Exchange a signed service-account assertion for a short-lived bearer token.

    Every failure mode (signing, network, non-2xx, unexpected body) surfaces as
    UpstreamAuthError so the caller can report a 5xx without leaking details.
    """
    assertion = create_service_account_assertion(
        settings.credentials,
        audience=settings.token_url,
        lifetime=timedelta(seconds=settings.token_lifetime_seconds),
    )
    http = session or requests.Session()
    try:
        res = http.post(
            settings.token_url,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            timeout=settings.timeout_seconds,
        )
    except requests.RequestException as e:
        raise UpstreamAuthError(f"token request failed: {type(e).__name__}") from e

    if not 200 <= res.status_code < 300:
        raise UpstreamAuthError(f"token endpoint returned HTTP {res.status_code}")
    try:
        payload = res.json()
    except ValueError as e:
        raise UpstreamAuthError("token endpoint returned malformed JSON") from e

    token = payload.get("access_token") if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token:
        raise UpstreamAuthError("token endpoint response has no access_token")
    logger.debug("Obtained access token for %s", settings.credentials.client_email)
    return token
