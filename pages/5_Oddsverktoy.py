import logging
import streamlit as st

from kupong.app_state import init_app
from kupong.ui import apply_global_styles, render_sidebar, render_hero, render_admin_gate
from kupong.coupons import add_odds_question, list_active_coupons
from kupong.odds import (
    InvalidOdds,
    MatchOdds,
    create_options_with_points,
    format_points_label,
    odds_to_points,
    translate_odds_to_points,
)

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Oddsverktøy", page_icon="🎯", layout="wide")

init_app()
apply_global_styles()
render_sidebar()

render_hero("Oddsverktøy", "Gjør odds om til poeng og legg kamper inn som spørsmål.")

render_admin_gate()

st.subheader("Kalkulator")
single = st.number_input("Odds", min_value=0.01, value=2.00, step=0.05)
try:
    st.metric("Poeng", format_points_label(odds_to_points(single)))
except InvalidOdds as e:
    st.warning(str(e))

st.divider()

st.subheader("Legg til kamp")
coupons = list_active_coupons()
if not coupons:
    st.info("Ingen aktive kuponger å legge kamper i.")
    st.stop()

coupon_map = {c.title: c for c in coupons}
sel = st.selectbox("Kupong", list(coupon_map.keys()))
coupon = coupon_map[sel]

col1, col2 = st.columns(2)
with col1:
    home_team = st.text_input("Hjemmelag")
with col2:
    away_team = st.text_input("Bortelag")

c1, c2, c3 = st.columns(3)
with c1:
    home_odds = st.number_input("H (hjemmeseier)", min_value=1.01, value=2.10, step=0.05)
with c2:
    draw_odds = st.number_input("U (uavgjort)", min_value=1.01, value=3.30, step=0.05)
with c3:
    away_odds = st.number_input("B (borteseier)", min_value=1.01, value=3.40, step=0.05)

odds = MatchOdds(home_win=home_odds, draw=draw_odds, away_win=away_odds)
try:
    points = translate_odds_to_points(odds)
    st.write(", ".join(create_options_with_points(home_team or "Hjemme", away_team or "Borte", points)))
except InvalidOdds as e:
    st.warning(str(e))
    st.stop()

if st.button("Legg til som spørsmål", type="primary"):
    if not home_team.strip() or not away_team.strip():
        st.warning("Fyll inn begge lagene.")
    else:
        try:
            add_odds_question(coupon.id, home_team.strip(), away_team.strip(), odds)
            st.success(f"Spørsmål lagt til: {home_team} vs {away_team}")
        except Exception as e:
            logger.exception("Kunne ikke legge til kamp")
            st.error(f"Kunne ikke legge til spørsmål: {e}")
