import logging
import streamlit as st

from kupong.app_state import current_device_id, get_local_store, take_result_update
from kupong.auth import admin_enabled, verify_admin
from kupong.identity import load_player_name, short_device_id

logger = logging.getLogger(__name__)


def apply_global_styles():
    st.markdown(
        """
        <style>
        :root {
            --bg-0: #f4f6f8;
            --bg-1: #ffffff;
            --fg-0: #1b2430;
            --muted: #5f6b7a;
            --accent: #1a73e8;
            --win: #2f9e44;
        }

        .stApp {
            background: var(--bg-0);
            color: var(--fg-0);
        }

        .hero {
            padding: 1.25rem 1.5rem;
            background: linear-gradient(120deg, #0b3d91 0%, #1a73e8 100%);
            color: #ffffff;
            border-radius: 14px;
            margin-bottom: 1.25rem;
        }

        .hero h2 {
            margin-bottom: 0.35rem;
            color: #ffffff;
        }

        .hero p {
            margin: 0;
            opacity: 0.9;
        }

        .winner {
            color: var(--win);
            font-weight: 700;
        }

        .pending {
            color: var(--muted);
        }

        [data-testid="stSidebarNav"] {
            display: none;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_hero(title: str, subtitle: str):
    st.markdown(
        f"""
        <div class="hero">
            <h2>{title}</h2>
            <p>{subtitle}</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_sidebar():
    with st.sidebar:
        render_nav()

        st.divider()

        st.header("Deg")
        name = load_player_name(get_local_store())
        device_id = current_device_id()
        st.markdown(f"**Navn:** {name or '-'}")
        st.caption(f"Enhet: {short_device_id(device_id)}")

        st.divider()

        st.header("Admin")
        render_admin_status()


def render_nav():
    st.header("Meny")
    st.page_link("app.py", label="Hjem", icon="🏠")
    st.page_link("pages/1_Kuponger.py", label="Kuponger", icon="📝")
    st.page_link("pages/2_Resultater.py", label="Resultater", icon="🏆")
    st.page_link("pages/3_Statistikk.py", label="Statistikk", icon="📊")
    if st.session_state.get("is_admin"):
        st.page_link("pages/4_Admin.py", label="Admin", icon="🛠")
        st.page_link("pages/5_Oddsverktoy.py", label="Oddsverktøy", icon="🎯")


def render_admin_status():
    if st.session_state.get("is_admin"):
        st.success("Innlogget som admin")
        if st.button("Logg ut", key="admin_logout_btn"):
            st.session_state.is_admin = False
            st.rerun()
    else:
        st.caption("Adminsidene krever passord.")


def render_admin_gate():
    """Stop the page unless the session has passed the admin check."""
    if st.session_state.get("is_admin"):
        return

    if not admin_enabled():
        st.error("Admin er ikke konfigurert. Sett KUPONG_ADMIN_PASSWORD_HASH.")
        st.stop()

    st.subheader("🔑 Logg inn som admin")
    password = st.text_input("Passord", type="password", key="admin_password")
    if st.button("Logg inn", key="admin_login_btn"):
        try:
            if verify_admin(password):
                st.session_state.is_admin = True
                st.rerun()
            else:
                st.error("Feil passord")
        except Exception:
            logger.exception("Admin innlogging feilet")
            st.error("Kunne ikke logge inn. Prøv igjen.")
    st.stop()


@st.fragment(run_every=5)
def watch_result_updates():
    """Rerun the page when an admin has changed results in any session."""
    signal = take_result_update()
    if signal:
        logger.info("Results changed for coupon %s, refreshing", signal["coupon_id"])
        st.rerun(scope="app")
