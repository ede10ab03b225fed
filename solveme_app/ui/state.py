from __future__ import annotations
import streamlit as st
from solveme_app.config import settings
from solveme_app.preferences import PreferenceStore
from solveme_app.services.event_loop import BackgroundLoop
from solveme_app.workflow import WorkflowController


@st.cache_resource
def get_background_loop() -> BackgroundLoop:
    return BackgroundLoop()


def init_session_state() -> None:
    if "preference_store" not in st.session_state:
        store = PreferenceStore(settings.app_db_path)
        prefs = store.load()
        st.session_state.preference_store = store
        st.session_state.selected_language = prefs.language
        st.session_state.answer_length = prefs.answer_length

    # one controller per browser session, never shared
    if "controller" not in st.session_state:
        st.session_state.controller = WorkflowController.from_settings(settings)

    st.session_state.setdefault("input_mode", "Upload")
    st.session_state.setdefault("last_status", None)


def save_language() -> None:
    st.session_state.preference_store.set_language(st.session_state.selected_language)


def save_answer_length() -> None:
    st.session_state.preference_store.set_answer_length(st.session_state.answer_length)
