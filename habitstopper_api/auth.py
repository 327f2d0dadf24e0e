from __future__ import annotations

import logging
import secrets

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from habitstopper_api.errors import StoreUnavailable, Unauthorized

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
SESSION_STATE_KEY = "oauth_state"


def _token_matches(candidate: str, expected: str) -> bool:
    if not expected:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


async def _user_from_session(request: Request) -> dict | None:
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None
    user = await request.app.state.user_store.get(user_id)
    if not user:
        # Cookie outlived its user row.
        request.session.pop(SESSION_USER_KEY, None)
        return None
    return user


async def _user_from_backend_token(request: Request) -> dict | None:
    token = request.headers.get("X-Backend-Token")
    if not token:
        return None
    if not _token_matches(token, request.app.state.settings.backend_session_secret):
        logger.warning("Rejected request with invalid backend token from %s", request.client.host if request.client else "?")
        return None
    subject = (request.headers.get("X-User-Subject") or "").strip()
    if not subject:
        return None
    email = (request.headers.get("X-User-Email") or "").strip().lower() or None
    name = (request.headers.get("X-User-Name") or "").strip() or None
    user, created = await request.app.state.user_store.find_or_create_by_google_id(subject, name, email)
    if created:
        logger.info("Created user %s for %s", user.get("id"), email or subject)
    return user


async def resolve_user(request: Request) -> dict | None:
    """Map the request's credential (session cookie or backend token) to a user row."""
    try:
        user = await _user_from_session(request)
        if user:
            return user
        return await _user_from_backend_token(request)
    except (SQLAlchemyError, OSError) as exc:
        logger.exception("User lookup failed")
        raise StoreUnavailable() from exc


async def optional_user(request: Request) -> dict | None:
    return await resolve_user(request)


async def require_user(request: Request) -> dict:
    user = await resolve_user(request)
    if not user:
        raise Unauthorized()
    return user
