"""
ECHORA - Streamlit Frontend

Login, dashboard, Echo settings, account and chat pages.
Connects to the FastAPI backend for everything.

Run with: streamlit run streamlit_app.py
"""
import asyncio
import os

import streamlit as st

from echora.ui.api_client import ApiError, EchoraApiClient
from echora.ui.chat_session import ChatSession, TurnInProgress, TurnState

# ============================================================
# Configuration
# ============================================================

API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
MEMORY_RECALL_LIMIT = int(os.getenv("MEMORY_RECALL_LIMIT", "8"))

st.set_page_config(
    page_title="ECHORA",
    page_icon="🔮",
    layout="centered",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .stApp {
        background-color: #0b0b10;
    }
    h1, h2, h3 {
        color: #d8b4fe !important;
        letter-spacing: -0.5px;
    }
    .stChatMessage {
        border-radius: 12px;
        border: 1px solid #27272a;
    }
    .stButton > button {
        border-radius: 8px;
        font-weight: 600;
    }
</style>
""", unsafe_allow_html=True)

STATE_LABELS = {
    TurnState.SENDING: "Remembering what your Echo knows about you…",
    TurnState.AWAITING_REPLY: "ECHORA is thinking…",
    TurnState.EXTRACTING_MEMORY: "Deciding what to remember…",
}


# ============================================================
# Session State Initialization
# ============================================================

def init_session_state():
    """Initialize session state variables."""
    if "api" not in st.session_state:
        st.session_state.api = EchoraApiClient(API_BASE_URL)
    if "chat" not in st.session_state:
        st.session_state.chat = ChatSession(st.session_state.api, memory_limit=MEMORY_RECALL_LIMIT)
    if "user" not in st.session_state:
        st.session_state.user = None
    if "page" not in st.session_state:
        st.session_state.page = "login"


def go(page: str):
    st.session_state.page = page
    st.rerun()


def require_login() -> bool:
    """Session gate for every page but login/signup."""
    api: EchoraApiClient = st.session_state.api
    try:
        session = api.get_session()
    except ApiError as e:
        st.error(e.message)
        return False

    if session is None:
        st.session_state.user = None
        st.session_state.chat = ChatSession(api, memory_limit=MEMORY_RECALL_LIMIT)
        go("login")
        return False

    st.session_state.user = session["user"]
    return True


# ============================================================
# Pages
# ============================================================

def render_login():
    st.title("Welcome back to ECHORA")
    st.caption("Log in to talk to your Echo.")

    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", use_container_width=True)

    if submitted:
        try:
            with st.spinner("Logging in…"):
                st.session_state.api.login(email, password)
            go("dashboard")
        except ApiError as e:
            st.error(e.message)

    if st.button("No account yet? Sign up"):
        go("signup")


def render_signup():
    st.title("Create your ECHORA account")

    with st.form("signup"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password", help="At least 6 characters")
        submitted = st.form_submit_button("Sign up", use_container_width=True)

    if submitted:
        try:
            with st.spinner("Creating account…"):
                st.session_state.api.signup(email, password)
            st.success("Account created. You can log in now.")
        except ApiError as e:
            st.error(e.message)

    if st.button("Already have an account? Log in"):
        go("login")


def render_dashboard():
    st.title("Your Echo Dashboard")

    try:
        with st.spinner("Loading your Echo…"):
            status = st.session_state.api.dashboard()
    except ApiError as e:
        st.error(e.message)
        return

    if status["configured"]:
        st.success("✅ Your Echo brain is configured.")
        st.write(f"**Tones:** {', '.join(status['tones']) or 'Not set'}")
        st.write(f"**Auto-reply:** {'Enabled' if status['auto_reply_enabled'] else 'Disabled'}")
        st.caption("Base personality & safety rules are saved. You can edit them anytime.")
    else:
        st.warning("⚠️ No Echo settings found.")
        st.caption("You'll need to configure your Echo before you can start chatting.")

    c1, c2 = st.columns(2)
    c1.metric("Memories", status["memory_count"])
    c2.metric("Own API key", "On file" if status["has_api_key"] else "None")

    col1, col2 = st.columns(2)
    with col1:
        label = "Edit Echo settings" if status["configured"] else "Train your Echo"
        if st.button(label, use_container_width=True):
            go("settings")
    with col2:
        if st.button("Open Chat", use_container_width=True, type="primary"):
            go("chat")


def render_settings():
    st.title("Train your Echo")
    st.caption("Define how ECHORA should speak, what it should avoid, and the values behind its guidance.")

    api: EchoraApiClient = st.session_state.api
    try:
        current = api.get_settings() or {}
    except ApiError as e:
        st.error(f"Could not load your settings: {e.message}")
        return

    with st.form("settings"):
        tones = st.text_input(
            "Tone",
            value=", ".join(current.get("tones") or []),
            placeholder="calm, direct, grounded, understanding",
        )
        boundaries = st.text_area(
            "Boundaries",
            value=current.get("boundaries") or "",
            placeholder="Topics ECHORA should avoid, communication limits…",
        )
        base_prompt = st.text_area(
            "Philosophy",
            value=current.get("base_prompt") or "",
            placeholder="What does ECHORA believe about life, growth, responsibility?",
        )
        safety_rules = st.text_area(
            "Safety rules",
            value=current.get("safety_rules") or "",
        )
        reply_style = st.text_area(
            "Default reply style",
            value=current.get("default_reply_style") or "",
            placeholder="Conversational with optional structured steps for clarity…",
        )
        auto_reply = st.toggle("Auto-reply", value=bool(current.get("auto_reply_enabled")))
        submitted = st.form_submit_button("Save & Begin Chat", use_container_width=True)

    if submitted:
        # The backend stores exactly this record; every field is sent
        payload = {
            "tones": tones,
            "boundaries": boundaries,
            "base_prompt": base_prompt,
            "safety_rules": safety_rules,
            "default_reply_style": reply_style,
            "auto_reply_enabled": auto_reply,
        }
        try:
            with st.spinner("Saving…"):
                api.save_settings(payload)
            go("chat")
        except ApiError as e:
            st.error(f"Could not save your settings: {e.message}")


def render_account():
    st.title("Account settings")
    st.caption(
        "Use your own Groq API key so your Echo runs on your credits. "
        "Create one at https://console.groq.com/keys (it starts with gsk_)."
    )

    api: EchoraApiClient = st.session_state.api
    try:
        account = api.account()
    except ApiError as e:
        st.error(f"Could not load your profile: {e.message}")
        return

    st.write(f"**Email:** {account['email']}")
    if account["has_api_key"]:
        st.success(f"Key on file ({account['api_key_hint']})")
    else:
        st.info("No key saved yet")

    with st.form("api_key"):
        key = st.text_input("Paste your Groq API key", type="password", autocomplete="off", placeholder="gsk_...")
        submitted = st.form_submit_button("Save API key")

    if submitted:
        if not key.strip():
            st.error("Please paste a valid API key.")
            return
        try:
            with st.spinner("Saving…"):
                api.save_api_key(key)
            st.success("API key saved. Your Echo will now use your own credits.")
        except ApiError as e:
            st.error(f"Could not save your key: {e.message}")


def render_chat():
    st.title("ECHORA Chat")
    chat: ChatSession = st.session_state.chat

    for message in chat.messages:
        with st.chat_message("user" if message.role == "user" else "assistant"):
            st.markdown(message.text)

    if chat.notice:
        st.warning(chat.notice)
    if chat.last_memory:
        st.caption(f"🧠 Remembered: {chat.last_memory}")
    if chat.needs_login:
        if st.button("Log in again"):
            chat.needs_login = False
            go("login")
        return

    prompt = st.chat_input("Type your message…", disabled=not chat.input_enabled)
    if not prompt:
        return

    with st.chat_message("user"):
        st.markdown(prompt)

    status = st.empty()

    def show_state(state: TurnState):
        label = STATE_LABELS.get(state)
        if label:
            status.caption(label)
        else:
            status.empty()

    chat.on_state_change = show_state
    try:
        asyncio.run(chat.send(prompt))
    except TurnInProgress as e:
        st.info(str(e))
    finally:
        chat.on_state_change = None

    st.rerun()


# ============================================================
# Sidebar
# ============================================================

def render_sidebar():
    with st.sidebar:
        st.title("🔮 ECHORA")
        user = st.session_state.user
        if not user:
            return

        st.caption(user["email"])
        st.divider()
        for page, label in (
            ("dashboard", "🏠 Dashboard"),
            ("chat", "💬 Chat"),
            ("settings", "🧬 Echo settings"),
            ("account", "🔑 Account"),
        ):
            if st.button(label, use_container_width=True, key=f"nav_{page}"):
                go(page)

        st.divider()
        if st.button("🧹 Clear chat", use_container_width=True):
            try:
                st.session_state.chat.reset()
            except TurnInProgress as e:
                st.info(str(e))
            st.rerun()
        if st.button("🚪 Log out", use_container_width=True):
            try:
                st.session_state.api.logout()
            except ApiError:
                pass
            st.session_state.user = None
            st.session_state.chat = ChatSession(st.session_state.api, memory_limit=MEMORY_RECALL_LIMIT)
            go("login")


# ============================================================
# Main App
# ============================================================

PAGES = {
    "dashboard": render_dashboard,
    "settings": render_settings,
    "account": render_account,
    "chat": render_chat,
}


def main():
    """Main application entry point."""
    init_session_state()
    api: EchoraApiClient = st.session_state.api

    if not api.health():
        st.warning("⚠️ Cannot connect to the ECHORA server. Please start it:")
        st.code("uvicorn echora.api.main:app --reload --port 8000", language="bash")
        return

    page = st.session_state.page
    if page == "login":
        render_sidebar()
        render_login()
        return
    if page == "signup":
        render_sidebar()
        render_signup()
        return

    if not require_login():
        return

    render_sidebar()
    PAGES.get(page, render_dashboard)()


if __name__ == "__main__":
    main()
