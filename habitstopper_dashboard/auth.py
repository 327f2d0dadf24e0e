from __future__ import annotations

import os
from datetime import date, datetime
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import streamlit as st

ENV_FALLBACK_KEYS = {
    ("auth", "redirect_uri"): "AUTH_REDIRECT_URI",
    ("auth", "cookie_secret"): "AUTH_COOKIE_SECRET",
    ("auth", "google", "client_id"): "GOOGLE_CLIENT_ID",
    ("auth", "google", "client_secret"): "GOOGLE_CLIENT_SECRET",
    ("auth", "google", "server_metadata_url"): "GOOGLE_SERVER_METADATA_URL",
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "BACKEND_SESSION_SECRET"): "BACKEND_SESSION_SECRET",
    ("app", "APP_TIMEZONE"): "APP_TIMEZONE",
}


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except FileNotFoundError:
        # No secrets.toml at all.
        return default
    return current


def api_base_url():
    return str(get_secret(("app", "API_BASE_URL")) or "").strip()


def backend_token():
    return str(get_secret(("app", "BACKEND_SESSION_SECRET")) or "").strip()


def app_timezone():
    return str(get_secret(("app", "APP_TIMEZONE")) or "UTC").strip()


def today_in_app_timezone():
    try:
        return datetime.now(ZoneInfo(app_timezone())).date()
    except ZoneInfoNotFoundError:
        return date.today()


def auth_configured():
    return bool(
        get_secret(("auth", "redirect_uri"))
        and get_secret(("auth", "cookie_secret"))
        and get_secret(("auth", "google", "client_id"))
        and get_secret(("auth", "google", "client_secret"))
    )


def enforce_google_login():
    if not auth_configured():
        st.markdown("### Google Login Setup Required")
        st.markdown("Configure Google OAuth in `.streamlit/secrets.toml` before using the app.")
        st.code(
            "[auth]\n"
            "redirect_uri = \"http://localhost:8501/oauth2callback\"\n"
            "cookie_secret = \"LONG_RANDOM_SECRET\"\n\n"
            "[auth.google]\n"
            "client_id = \"YOUR_CLIENT_ID\"\n"
            "client_secret = \"YOUR_CLIENT_SECRET\"\n"
            "server_metadata_url = \"https://accounts.google.com/.well-known/openid-configuration\"\n\n"
            "[app]\n"
            "API_BASE_URL = \"http://localhost:8000\"\n"
            "BACKEND_SESSION_SECRET = \"SAME_VALUE_AS_THE_API\"",
            language="toml",
        )
        st.stop()

    redirect_uri = str(get_secret(("auth", "redirect_uri")) or "").strip()
    if urlparse(redirect_uri).path != "/oauth2callback":
        st.error("Invalid auth.redirect_uri. For Streamlit st.login it must end with /oauth2callback.")
        st.stop()

    if not st.user.is_logged_in:
        st.markdown("<h1 class='hero-title'>Break the cycle.</h1>", unsafe_allow_html=True)
        if st.button("Sign in with Google", key="google_login"):
            st.login("google")
        st.stop()


def current_identity():
    return {
        "sub": str(getattr(st.user, "sub", "") or "").strip(),
        "email": str(getattr(st.user, "email", "") or "").strip().lower(),
        "name": str(getattr(st.user, "name", "") or "").strip(),
    }


def first_name(user):
    name = str((user or {}).get("name") or "").strip()
    if name:
        return name.split()[0]
    local = str((user or {}).get("email") or "").split("@")[0].replace(".", " ").strip()
    return local.title() if local else "there"
