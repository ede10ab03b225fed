from __future__ import annotations
from typing import Optional
import streamlit as st
from solveme_app.config import ACCEPTED_IMAGE_TYPES, ANSWER_LENGTHS, LANGUAGES, STATUS_REFRESH_SECONDS
from solveme_app.errors import InvalidInput, WorkflowBusy
from solveme_app.models import PendingFile, RunStatus
from solveme_app.ui.state import get_background_loop, save_answer_length, save_language


def preferences_form() -> None:
    st.selectbox("Select Language", list(LANGUAGES), key="selected_language",
                 format_func=LANGUAGES.get, on_change=save_language)
    st.selectbox("Answer Length", list(ANSWER_LENGTHS), key="answer_length",
                 format_func=ANSWER_LENGTHS.get, on_change=save_answer_length)


def file_picker() -> Optional[PendingFile]:
    mode = st.radio("Photo source", ["Upload", "Camera"], key="input_mode", horizontal=True)
    if mode == "Upload":
        uploaded = st.file_uploader("Select Photo", type=ACCEPTED_IMAGE_TYPES, key="photo_upload")
    else:
        uploaded = st.camera_input("Take a Photo", key="photo_camera")

    if uploaded is None:
        return None

    data = uploaded.getvalue()
    st.image(data, use_container_width=True)
    st.caption(f"Selected file: *{uploaded.name}*")
    return PendingFile(name=uploaded.name, data=data, content_type=uploaded.type or None)


def submit_controls(pending: Optional[PendingFile]) -> None:
    controller = st.session_state.controller
    busy = controller.is_busy

    c1, c2 = st.columns([3, 1])
    with c1:
        clicked = st.button("Submit", type="primary", use_container_width=True,
                            disabled=busy or pending is None)
    with c2:
        if busy:
            st.button("Cancel", use_container_width=True,
                      on_click=lambda: get_background_loop().cancel(controller))

    if not clicked:
        return
    try:
        get_background_loop().start_run(controller, pending,
                                        st.session_state.selected_language,
                                        st.session_state.answer_length)
    except InvalidInput as e:
        st.error(str(e))
    except WorkflowBusy:
        st.warning("A request is already in progress.")
    else:
        st.rerun()


@st.fragment(run_every=STATUS_REFRESH_SECONDS)
def run_status() -> None:
    state = st.session_state.controller.state

    # a run that just settled must re-enable the form outside this fragment
    previous = st.session_state.last_status
    st.session_state.last_status = state.status
    if previous is not None and previous.is_active and not state.status.is_active:
        st.rerun()

    if state.status is RunStatus.SUBMITTING:
        st.info("Submitting…")
    elif state.status is RunStatus.POLLING:
        st.info(f"Waiting for the result… (checks so far: {state.attempts})")
    elif state.status is RunStatus.SUCCEEDED:
        with st.container(border=True):
            st.subheader("Result:")
            st.markdown(state.rendered)
    elif state.status is RunStatus.FAILED:
        st.error(state.error)
    elif state.status is RunStatus.TIMED_OUT:
        st.warning(f"No result yet: {state.error}")
    elif state.status is RunStatus.CANCELLED:
        st.caption("Request cancelled.")
