from __future__ import annotations
import logging
import streamlit as st
from solveme_app.config import APP_SUBTITLE, APP_TITLE, settings
from solveme_app.ui.state import init_session_state
from solveme_app.ui.sections import file_picker, preferences_form, run_status, submit_controls

logging.basicConfig(level=settings.log_level,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title=APP_TITLE, layout="centered")
st.title(APP_TITLE)
st.caption(APP_SUBTITLE)

init_session_state()

with st.container(border=True):
    preferences_form()
    pending = file_picker()
    submit_controls(pending)

run_status()
