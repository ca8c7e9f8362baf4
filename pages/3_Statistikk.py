import logging
import streamlit as st

from kupong.app_state import init_app, current_device_id
from kupong.ui import apply_global_styles, render_sidebar, render_hero, watch_result_updates
from kupong.stats import get_player_stats, get_global_leaderboards

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Statistikk", page_icon="📊", layout="wide")

init_app()
apply_global_styles()
render_sidebar()
watch_result_updates()

render_hero("Statistikk", "Din egen statistikk og topplistene for alle spillere.")

MEDALS = ["🥇", "🥈", "🥉"]

tab_me, tab_all = st.tabs(["Min statistikk", "Alle spillere"])

with tab_me:
    try:
        me = get_player_stats(current_device_id())
    except Exception:
        logger.exception("Feil ved henting av spillerstatistikk")
        st.error("Kunne ikke hente statistikken din.")
        me = None
    if me is not None:
        if me.games_played == 0 and me.wins == 0:
            st.info("Du har ingen rettede kuponger enda.")
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Kuponger spilt", me.games_played)
        c2.metric("Riktige svar", f"{me.total_correct} / {me.total_questions}")
        c3.metric("Snitt", f"{me.avg_score_percent:.1f}%")
        c4.metric("Seire", f"🏆 {me.wins}")
        st.caption(f"Totalt {me.total_points:g} poeng. Kuponger uten fasit telles ikke med i snittet.")


def _render_board(title, players, value, empty_text):
    st.subheader(title)
    if not players:
        st.caption(empty_text)
        return
    rows = []
    for i, p in enumerate(players):
        place = MEDALS[i] if i < len(MEDALS) else str(i + 1)
        rows.append({"Plassering": place, "Spiller": p.name, title.split(" - ")[-1]: value(p)})
    st.dataframe(rows, hide_index=True, use_container_width=True)


with tab_all:
    if st.button("🔄 Oppdater statistikk"):
        st.rerun()
    try:
        boards = get_global_leaderboards()
    except Exception:
        logger.exception("Feil ved henting av global statistikk")
        st.error("Kunne ikke hente spillstatistikk.")
        st.stop()

    _render_board("Topp - Flest seire", boards.by_wins, lambda p: p.wins, "Ingen seire registrert enda.")
    _render_board("Topp - Best snitt", boards.by_avg_score, lambda p: f"{p.avg_score_percent:.1f}%", "Ingen rettede kuponger enda.")
    _render_board("Topp - Flest riktige", boards.by_total_correct, lambda p: p.total_correct, "Ingen riktige svar enda.")
