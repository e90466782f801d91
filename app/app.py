"""
UI layer
Purpose: Streamlit-only glue. Renders the sign-in form, role picker, interview
transcript, feedback and history, collects user inputs, and delegates all work
to the controller. Keeps UI concerns separate from the interview logic so the
logic can be unit tested without Streamlit.
"""

import streamlit as st
from audio_recorder_streamlit import audio_recorder
import hashlib

from core.config import QUESTIONS_PER_SESSION, settings
from core.controller import InterviewSessionController, build_backends, build_speech
from core.models import Feedback, RoleType
from core.persistence.session_store import StoreError
from core.roles import get_role_config, list_roles
from core.services.auth import AuthError
from core.services.voice import autoplay_html
from core.utils.logger import get_logger

logger = get_logger("ui")

# ---------------------------
# Page config
# ---------------------------
st.set_page_config(
    page_title="Interview Practice Partner",
    page_icon="🎯",
    layout="wide",
    initial_sidebar_state="collapsed",
)

ROLE_ICONS = {
    RoleType.SALES: "💼",
    RoleType.ENGINEER: "💻",
    RoleType.RETAIL_ASSOCIATE: "🛍️",
    RoleType.MARKETING: "📣",
    RoleType.CUSTOMER_SERVICE: "🎧",
}


@st.cache_resource
def shared_memory_backends():
    """One in-memory store/auth per process so history survives reruns."""
    return build_backends(settings)


def new_controller() -> InterviewSessionController:
    if settings.uses_supabase:
        store, auth = build_backends(settings)
    else:
        store, auth = shared_memory_backends()
    try:
        speech = build_speech(settings)
    except RuntimeError as e:
        logger.warning("Speech disabled: %s", e)
        speech = None
    return InterviewSessionController(store, auth, speech=speech)


# ---------------------------
# Session state init
# ---------------------------
st_session = st.session_state
st_session.setdefault("view", "home")
st_session.setdefault("feedback_session_id", None)
st_session.setdefault("feedback_role", None)
st_session.setdefault("speak_questions", False)
st_session.setdefault("voice_mode", False)
st_session.setdefault("last_voice_sig", None)
st_session.setdefault("tts_audio_queue", [])

if st_session.get("controller") is None:
    try:
        st_session.controller = new_controller()
    except RuntimeError as e:
        st.error(f"Configuration error: {e}")
        st.stop()


# ---------------------------
# Helpers
# ---------------------------
def get_controller() -> InterviewSessionController:
    """Return the controller object."""
    return st_session.controller


def go_home():
    get_controller().reset()
    st_session.view = "home"
    st_session.feedback_session_id = None
    st_session.feedback_role = None


def open_feedback(session_id: str, role: RoleType):
    st_session.feedback_session_id = session_id
    st_session.feedback_role = role
    st_session.view = "feedback"


def queue_question_audio(text: str):
    """Synthesize text for playback on the next rerun if spoken questions are on."""
    controller = get_controller()
    if not (st_session.speak_questions and controller.speech_enabled() and text):
        return
    try:
        audio = controller.speak(text)
    except Exception as e:
        logger.error("TTS failed: %s", e)
        st.toast(f"TTS failed: {e}", icon="⚠️")
        return
    if audio:
        st_session.tts_audio_queue.append(audio)


def start_interview(role: RoleType):
    controller = get_controller()
    try:
        first = controller.start_interview(role)
    except (StoreError, RuntimeError) as e:
        logger.error("Could not start interview: %s", e)
        st.toast(f"Could not start interview: {e}", icon="⚠️")
        return
    st_session.view = "interview"
    st_session.last_voice_sig = None
    queue_question_audio(first)


def submit_answer(text: str):
    controller = get_controller()
    try:
        nxt = controller.submit_response(text)
    except ValueError as e:
        st.toast(str(e), icon="⚠️")
        return
    except StoreError as e:
        logger.error("Saving response failed: %s", e)
        st.toast(f"Saving your response failed: {e}", icon="⚠️")
        return

    if nxt is None:
        open_feedback(controller.session.id, controller.role)
        return
    queue_question_audio(nxt.question)


def sign_out():
    try:
        get_controller().sign_out()
    except AuthError as e:
        logger.warning("Sign out failed: %s", e)
    st_session.view = "home"


def render_feedback(feedback: Feedback, role: RoleType):
    """Score metrics plus the strengths / improvements / narrative sections."""
    st.subheader(f"{get_role_config(role).title} Interview Feedback")
    cols = st.columns(3)
    labels = [
        (feedback.overall_score, "Overall"),
        (feedback.communication_score, "Communication"),
        (feedback.technical_score, "Technical"),
    ]
    for (val, label), col in zip(labels, cols):
        with col:
            st.metric(label, f"{val}/10")
            st.progress(val / 10)

    scol, icol = st.columns(2)
    with scol:
        st.markdown("#### Strengths")
        st.markdown("\n".join(f"- {s}" for s in feedback.strengths.split("; ")))
    with icol:
        st.markdown("#### Areas for improvement")
        st.markdown("\n".join(f"- {s}" for s in feedback.improvements.split("; ")))

    st.markdown("#### Detailed feedback")
    st.text(feedback.detailed_feedback)


# ---------------------------
# Auth
# ---------------------------
def render_auth():
    st.title("Interview Practice Partner")
    st.caption("Master your interview skills with practice sessions and instant feedback.")

    sign_in_tab, sign_up_tab = st.tabs(["Sign in", "Create account"])
    with sign_in_tab:
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Sign in", type="primary"):
                try:
                    get_controller().sign_in(email, password)
                    st.rerun()
                except ValueError as e:
                    st.error(str(e))
    with sign_up_tab:
        with st.form("sign_up"):
            email = st.text_input("Email", key="sign_up_email")
            password = st.text_input("Password", type="password", key="sign_up_pw")
            if st.form_submit_button("Create account", type="primary"):
                try:
                    get_controller().sign_up(email, password)
                    st.toast("Account created.", icon="✅")
                    st.rerun()
                except ValueError as e:
                    st.error(str(e))


# ---------------------------
# Home: role picker + history
# ---------------------------
def render_home():
    controller = get_controller()
    hcol, bcol = st.columns([5, 1])
    with hcol:
        st.title("Interview Practice Partner")
        st.caption("Master your interview skills with practice sessions.")
    with bcol:
        st.button("Sign out", on_click=sign_out)

    roles_col, history_col = st.columns([2, 1])
    with roles_col:
        st.subheader("Choose Your Role")
        st.caption("Select the position you'd like to practice interviewing for")
        grid = st.columns(2)
        for i, role in enumerate(list_roles()):
            config = get_role_config(role)
            with grid[i % 2]:
                with st.container(border=True):
                    st.markdown(f"### {ROLE_ICONS[role]} {config.title}")
                    st.caption(config.description)
                    st.button(
                        "Start interview",
                        key=f"start_{role.value}",
                        on_click=start_interview,
                        args=(role,),
                    )

    with history_col:
        st.subheader("Recent Interviews")
        try:
            history = controller.list_history()
        except StoreError as e:
            logger.error("Loading history failed: %s", e)
            st.warning("Could not load your interview history.")
            history = []
        if not history:
            st.info(
                "No interview history yet. "
                "Complete an interview to see your progress here."
            )
        for session, feedback in history:
            config = get_role_config(session.role_type)
            with st.container(border=True):
                st.markdown(f"**{config.title}**")
                when = session.completed_at
                if when:
                    st.caption(f"{when:%Y-%m-%d %H:%M}")
                if feedback:
                    st.metric("Score", f"{feedback.overall_score}/10")
                st.button(
                    "View feedback",
                    key=f"view_{session.id}",
                    on_click=open_feedback,
                    args=(session.id, session.role_type),
                )


# ---------------------------
# Interview
# ---------------------------
def render_interview():
    controller = get_controller()
    if not controller.is_active():
        go_home()
        st.rerun()

    config = get_role_config(controller.role)
    st.title(f"{config.title} Interview")
    st.caption(
        f"Question {controller.question_number()} of {QUESTIONS_PER_SESSION}"
    )

    vcol1, vcol2, vcol3 = st.columns([1, 1, 1])
    with vcol1:
        st_session.voice_mode = st.toggle(
            "🎙️ Voice mode",
            value=st_session.voice_mode,
            disabled=not controller.speech_enabled(),
        )
    with vcol2:
        st_session.speak_questions = st.toggle(
            "🔊 Speak questions",
            value=st_session.speak_questions,
            disabled=not controller.speech_enabled(),
        )
    with vcol3:
        st.button("Leave interview", on_click=go_home)

    if st_session.tts_audio_queue:
        mp3 = st_session.tts_audio_queue.pop(0)
        st.html(autoplay_html(mp3))

    transcript = st.container(height=500, border=True)
    with transcript:
        for exchange in controller.state.exchanges:
            with st.chat_message("assistant"):
                st.markdown(exchange.question)
            with st.chat_message("user"):
                st.markdown(exchange.response)
        with st.chat_message("assistant"):
            st.markdown(controller.state.current_question)

    user_text = None
    if st_session.voice_mode and controller.speech_enabled():
        wav_bytes = audio_recorder(
            pause_threshold=2,
            sample_rate=16_000,
            text="Press to record",
            icon_size="2x",
        )
        if wav_bytes:
            sig = hashlib.sha1(wav_bytes).hexdigest()
            if sig != st_session.get("last_voice_sig"):
                st_session.last_voice_sig = sig
                try:
                    with st.spinner("Transcribing…"):
                        user_text = controller.voice_to_text(wav_bytes)
                except Exception as e:
                    logger.error("Transcription failed: %s", e)
                    st.toast(f"Transcription failed: {e}", icon="⚠️")
    else:
        raw = st.chat_input("Type your response…")
        if raw is not None:
            user_text = raw

    if user_text is not None:
        submit_answer(user_text)
        st.rerun()


# ---------------------------
# Feedback
# ---------------------------
def render_feedback_view():
    controller = get_controller()
    session_id = st_session.feedback_session_id
    role = st_session.feedback_role
    st.button("← Back to home", on_click=go_home)

    if not session_id or role is None:
        st.info("No feedback available")
        return

    try:
        with st.spinner("Analyzing your interview performance..."):
            feedback = controller.load_or_generate_feedback(session_id, role)
    except StoreError as e:
        logger.error("Loading feedback failed: %s", e)
        st.error(f"Could not load feedback: {e}")
        return

    if feedback is None:
        st.info("No feedback available")
        return
    render_feedback(feedback, RoleType(role))


# ---------------------------
# Router
# ---------------------------
if get_controller().current_user is None:
    render_auth()
elif st_session.view == "interview":
    render_interview()
elif st_session.view == "feedback":
    render_feedback_view()
else:
    render_home()
