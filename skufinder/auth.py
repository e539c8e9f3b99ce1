"""Client-credentials token exchange for the management API."""
from __future__ import annotations

from typing import Optional

from .config import Credentials, FeedSettings
from .errors import AuthenticationError
from .util import log


def token_url(settings: FeedSettings, tenant_id: str) -> str:
    return f"{settings.identity_url}/{tenant_id}/oauth2/v2.0/token"


def acquire_token(session, credentials: Credentials, settings: FeedSettings) -> Optional[str]:
    """Return a bearer token, or ``None`` when no credentials are configured.

    A pre-issued access token takes priority over the client-credentials
    exchange. Raises :class:`AuthenticationError` if the exchange fails.
    """
    if credentials.access_token:
        log("INFO", "auth: using pre-issued access token")
        return credentials.access_token
    if not credentials.can_exchange:
        return None

    data = {
        "grant_type": "client_credentials",
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
        "scope": settings.scope,
    }
    try:
        response = session.post(token_url(settings, credentials.tenant_id), data=data)
    except Exception as exc:
        raise AuthenticationError(f"token request failed ({exc})") from exc

    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if response.status_code >= 400:
        detail = payload.get("error_description") if isinstance(payload, dict) else None
        raise AuthenticationError(detail or f"token endpoint returned {response.status_code}")

    token = payload.get("access_token") if isinstance(payload, dict) else None
    if not token:
        raise AuthenticationError("token endpoint returned no access_token")
    log("INFO", "auth: acquired management token")
    return token


__all__ = ["acquire_token", "token_url"]
