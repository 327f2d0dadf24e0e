import logging

import streamlit as st

from habitstopper_dashboard.calendar_view import month_title
from habitstopper_dashboard.constants import FAILED_LABEL, SUCCESS_LABEL, TRACK_PROMPT
from habitstopper_dashboard.data.api_client import ApiError
from habitstopper_dashboard.visualizations import build_month_calendar_html

logger = logging.getLogger(__name__)


def _record(controller, status):
    try:
        controller.record_today(status)
    except ApiError as exc:
        # Controller has already reverted the optimistic entry.
        logger.warning("Could not record %s: %s", status, exc)


def _shift(controller, delta):
    controller.change_displayed_month(delta)


def _refresh(controller):
    try:
        controller.refresh()
    except ApiError as exc:
        controller.state.last_error = exc.detail_text()


def render_tracker_tab(controller):
    state = controller.state

    st.markdown(f"<h2 class='hero-title'>{TRACK_PROMPT}</h2>", unsafe_allow_html=True)
    action_cols = st.columns([1, 2, 2, 1])
    with action_cols[1]:
        st.button(
            f"✓ {SUCCESS_LABEL}",
            key="tracker.success",
            type="primary",
            use_container_width=True,
            on_click=_record,
            args=(controller, "success"),
        )
    with action_cols[2]:
        st.button(
            f"✕ {FAILED_LABEL}",
            key="tracker.failed",
            use_container_width=True,
            on_click=_record,
            args=(controller, "failed"),
        )

    if state.last_error:
        st.warning(f"Last change was not saved: {state.last_error}")
        st.button("Reload history", key="tracker.refresh", on_click=_refresh, args=(controller,))

    nav_cols = st.columns([1, 4, 1])
    with nav_cols[0]:
        st.button("‹", key="tracker.prev_month", type="tertiary", on_click=_shift, args=(controller, -1))
    with nav_cols[1]:
        st.markdown(
            f"<div style='text-align:center;font-weight:500;'>{month_title(state.year, state.month)}</div>",
            unsafe_allow_html=True,
        )
    with nav_cols[2]:
        st.button("›", key="tracker.next_month", type="tertiary", on_click=_shift, args=(controller, 1))

    st.markdown(
        build_month_calendar_html(controller.calendar()),
        unsafe_allow_html=True,
    )
