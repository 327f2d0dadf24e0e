from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse

from habitstopper_api.auth import SESSION_STATE_KEY, SESSION_USER_KEY
from habitstopper_api.services import google_oauth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/auth/google")
async def google_login(request: Request):
    settings = request.app.state.settings
    if not settings.google_oauth_configured:
        raise HTTPException(status_code=400, detail="Google OAuth not configured")
    state = secrets.token_urlsafe(24)
    request.session[SESSION_STATE_KEY] = state
    return RedirectResponse(google_oauth_service.build_login_url(settings, state))


@router.get("/auth/google/callback")
async def google_callback(request: Request, code: str = "", state: str = ""):
    settings = request.app.state.settings
    expected_state = request.session.pop(SESSION_STATE_KEY, None)
    if not code:
        raise HTTPException(status_code=400, detail="Missing code")
    if not state or not expected_state or not secrets.compare_digest(state.encode("utf-8"), expected_state.encode("utf-8")):
        raise HTTPException(status_code=400, detail="State mismatch")
    try:
        profile = await google_oauth_service.fetch_profile(
            settings, code, transport=request.app.state.google_transport
        )
    except google_oauth_service.GoogleOAuthError as exc:
        logger.warning("Google login failed: %s", exc)
        raise HTTPException(status_code=502, detail="Google login failed") from exc
    user, created = await request.app.state.user_store.find_or_create_by_google_id(
        profile["sub"], profile.get("name"), profile.get("email")
    )
    if created:
        logger.info("Created user %s for %s", user["id"], profile.get("email") or profile["sub"])
    request.session[SESSION_USER_KEY] = user["id"]
    return RedirectResponse(settings.client_origin)


@router.get("/auth/logout")
async def logout(request: Request):
    request.session.clear()
    return RedirectResponse(request.app.state.settings.client_origin)
