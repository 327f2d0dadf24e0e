import logging

import streamlit as st

from habitstopper_dashboard.auth import (
    api_base_url,
    backend_token,
    current_identity,
    enforce_google_login,
    today_in_app_timezone,
)
from habitstopper_dashboard.data.api_client import ApiClient, ApiError
from habitstopper_dashboard.header import render_global_header
from habitstopper_dashboard.logging_config import configure_logging
from habitstopper_dashboard.state import session_slices
from habitstopper_dashboard.state.controller import ANONYMOUS, ClientController
from habitstopper_dashboard.tabs.tracker_tab import render_tracker_tab
from habitstopper_dashboard.theme import inject_theme_css

configure_logging()
logger = logging.getLogger("habitstopper_dashboard")

st.set_page_config(page_title="HabitStopper", page_icon="🛡", layout="centered")
inject_theme_css()
enforce_google_login()

api_client = ApiClient(api_base_url(), backend_token(), current_identity())
if not api_client.is_enabled():
    st.error("API_BASE_URL and BACKEND_SESSION_SECRET must be configured to reach the HabitStopper API.")
    st.stop()

client_state = session_slices.get_client_state()
controller = ClientController(client_state, api_client, clock=today_in_app_timezone)

signed_in_sub = api_client.identity.get("sub")
if client_state.phase == ANONYMOUS or client_state.user.get("sub") != signed_in_sub:
    try:
        api_user = api_client.current_user()
        if not api_user:
            raise ApiError(401, "The API did not accept this dashboard's credentials.")
        controller.login({**api_user, "sub": signed_in_sub})
    except ApiError as exc:
        logger.exception("Login against the API failed")
        st.error("Could not load your history from the HabitStopper API.")
        st.caption(exc.detail_text())
        st.stop()

render_global_header(controller)
render_tracker_tab(controller)
