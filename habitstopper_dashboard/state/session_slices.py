import streamlit as st

from habitstopper_dashboard.state.controller import ClientState


PREFIX = "slice"


def _key(slice_name):
    return f"{PREFIX}.{slice_name}"


def get_client_state():
    key = _key("client")
    if key not in st.session_state:
        st.session_state[key] = ClientState()
    return st.session_state[key]
