import logging
import streamlit as st

from kupong.app_state import init_app, get_local_store
from kupong.ui import apply_global_styles, render_sidebar, render_hero
from kupong.coupons import list_active_coupons
from kupong.identity import submitted_coupons
from kupong.models import as_utc

logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Tippekupong",
    page_icon="⚽",
    layout="wide",
    initial_sidebar_state="expanded",
)

init_app()
apply_global_styles()
render_sidebar()

render_hero("⚽ Tippekupong", "Lever kupongen før fristen, følg resultatene og se hvem som vinner.")

try:
    coupons = list_active_coupons()
except Exception:
    logger.exception("Kunne ikke hente aktive kuponger")
    st.error("Kunne ikke hente kuponger. Prøv igjen.")
    coupons = []

delivered = set(submitted_coupons(get_local_store()))

st.subheader("Aktive kuponger")
if not coupons:
    st.info("Ingen aktive kuponger akkurat nå.")
for c in coupons:
    status = "✅ Levert" if c.id in delivered else "✏️ Ikke levert"
    st.markdown(f"**{c.title}** · frist {as_utc(c.deadline):%d.%m.%Y %H:%M} UTC · {status}")

st.page_link("pages/1_Kuponger.py", label="Gå til kupongene", icon="📝")
