import streamlit as st

from habitstopper_dashboard.auth import first_name
from habitstopper_dashboard.constants import APP_NAME


def render_global_header(controller):
    cols = st.columns([4, 2, 1])
    with cols[0]:
        st.markdown(f"<span class='hs-brand'>🛡 {APP_NAME}</span>", unsafe_allow_html=True)
    user = controller.state.user
    if not user:
        return
    with cols[1]:
        st.caption(f"Hello, {first_name(user)}")
    with cols[2]:
        if st.button("Logout", key="header.logout", type="tertiary"):
            controller.logout()
            st.logout()
