"""Google OAuth 2.0 authorization-code flow (consent URL, code exchange, profile fetch)."""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx

from bizdir.core.config import settings
from bizdir.core.errors import UpstreamError

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
REQUEST_TIMEOUT = 10.0
SCOPES = "openid email profile"


@dataclass
class GoogleProfile:
    google_id: str
    email: str
    name: str
    avatar: Optional[str] = None


def _redact(text: str) -> str:
    """Remove secrets from text for safe logging."""
    return re.sub(r'("?(?:access_token|id_token|client_secret|code)"?\s*[:=]\s*"?)[^"&,\s]+', r"\1REDACTED", text)


def _require_config() -> None:
    if not settings.google_enabled:
        logger.error("GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET missing; Google login disabled")
        raise UpstreamError("Google login is not configured")


def build_authorization_url(state: str) -> str:
    """Consent screen URL; Google redirects back to settings.google_callback_url with code and state."""
    _require_config()
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_callback_url,
        "response_type": "code",
        "scope": SCOPES,
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def _call_google(method: str, url: str, **kwargs) -> dict:
    """Call a Google endpoint with logging. Returns parsed JSON or raises UpstreamError."""
    logger.info(f"Google OAuth calling: {method} {url}")
    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            response = await client.request(method, url, **kwargs)
    except httpx.RequestError as e:
        logger.error(f"Google OAuth request failed: {e}")
        raise UpstreamError("Google sign-in is unavailable")

    body_preview = _redact(response.text[:500]) if response.text else "(empty)"
    logger.info(f"Google OAuth response: status={response.status_code}, body_preview={body_preview}")
    if response.status_code != 200:
        raise UpstreamError(f"Google OAuth HTTP {response.status_code}")
    return response.json()


async def exchange_code(code: str) -> str:
    """Trade the authorization code for an access token."""
    data = await _call_google(
        "POST",
        GOOGLE_TOKEN_URL,
        data={
            "code": code,
            "client_id": settings.google_client_id,
            "client_secret": settings.google_client_secret,
            "redirect_uri": settings.google_callback_url,
            "grant_type": "authorization_code",
        },
    )
    access_token = data.get("access_token")
    if not access_token:
        raise UpstreamError("Google did not return an access token")
    return access_token


async def fetch_profile(access_token: str) -> GoogleProfile:
    data = await _call_google(
        "GET",
        GOOGLE_USERINFO_URL,
        headers={"Authorization": f"Bearer {access_token}"},
    )
    google_id = data.get("sub")
    email = data.get("email")
    if not google_id or not email:
        raise UpstreamError("Google profile is missing id or email")
    return GoogleProfile(
        google_id=str(google_id),
        email=email.strip().lower(),
        name=data.get("name") or email.split("@")[0],
        avatar=data.get("picture"),
    )


async def authenticate(code: str) -> GoogleProfile:
    """Full callback leg: code -> access token -> verified profile."""
    _require_config()
    access_token = await exchange_code(code)
    return await fetch_profile(access_token)
