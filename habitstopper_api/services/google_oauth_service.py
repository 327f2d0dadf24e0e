from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from habitstopper_api.settings import Settings

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthError(RuntimeError):
    pass


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        return str(payload.get("error_description") or payload.get("error") or response.text)
    return response.text


def build_login_url(settings: Settings, state: str) -> str:
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": "openid email profile",
        "include_granted_scopes": "true",
        "prompt": "select_account",
        "state": state,
    }
    return f"{AUTH_URL}?{urlencode(params)}"


async def fetch_profile(settings: Settings, code: str, transport: httpx.AsyncBaseTransport | None = None) -> dict:
    """Trade an authorization code for the signed-in account's profile.

    Returns a dict with ``sub``, ``name`` and ``email``. Only the profile is
    kept; tokens are discarded once the userinfo call returns.
    """
    payload = {
        "code": code,
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "redirect_uri": settings.google_redirect_uri,
        "grant_type": "authorization_code",
    }
    async with httpx.AsyncClient(timeout=20, transport=transport) as client:
        response = await client.post(TOKEN_URL, data=payload)
        if response.status_code >= 400:
            raise GoogleOAuthError(f"Google token exchange failed ({response.status_code}): {_error_message(response)}")
        access_token = response.json().get("access_token")
        if not access_token:
            raise GoogleOAuthError("Google OAuth did not return access_token")
        response = await client.get(USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        if response.status_code >= 400:
            raise GoogleOAuthError(f"Google userinfo failed ({response.status_code}): {_error_message(response)}")
    profile = response.json()
    if not profile.get("sub"):
        raise GoogleOAuthError("Google userinfo did not include a subject")
    logger.info("Resolved Google account %s", profile.get("email") or profile["sub"])
    return {
        "sub": str(profile["sub"]),
        "name": profile.get("name"),
        "email": profile.get("email"),
    }
