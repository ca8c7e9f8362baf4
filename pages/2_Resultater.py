import logging
import streamlit as st

from kupong.app_state import init_app
from kupong.ui import apply_global_styles, render_sidebar, render_hero, watch_result_updates
from kupong.coupons import list_coupons, list_questions, list_correct_answers
from kupong.results import coupon_results
from kupong.scoring import answer_key

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Resultater", page_icon="🏆", layout="wide")

init_app()
apply_global_styles()
render_sidebar()
watch_result_updates()

render_hero("Resultater", "Poeng og vinnere for hver kupong. Oppdateres når fasit endres.")

coupons = list_coupons()
if not coupons:
    st.info("Ingen kuponger enda.")
    st.stop()

coupon_map = {c.title: c for c in coupons}
sel = st.selectbox("Kupong", list(coupon_map.keys()))
coupon = coupon_map[sel]

if st.button("Oppdater resultater"):
    st.rerun()

try:
    results, has_key = coupon_results(coupon.id)
    questions = list_questions(coupon.id)
    key = answer_key(list_correct_answers(coupon.id))
except Exception as e:
    logger.exception("Feil ved lasting av resultater")
    st.error(f"Feil ved lasting av resultater: {e}")
    st.stop()

if not results:
    st.info("Ingen resultater enda.")
    st.stop()

col1, col2 = st.columns([1, 2])
with col1:
    st.subheader("Stilling")
    rows = []
    for r in results:
        if has_key:
            status = f"{r.score.correct_count} / {r.score.total_questions} ({r.score.points:g}p)"
        else:
            status = "Venter på resultater..."
        rows.append({"Navn": ("🏅 " if r.is_winner else "") + r.name, "Status": status})
    st.dataframe(rows, hide_index=True, use_container_width=True)

with col2:
    st.subheader("Svar")
    for r in results:
        title = f"{'🏅 ' if r.is_winner else ''}{r.name}"
        if has_key:
            title += f" · {r.score.correct_count} av {r.score.total_questions} riktige"
        with st.expander(title, expanded=r.is_winner):
            for q in questions:
                answer = r.answers.get(str(q.id), "-")
                verdict = r.score.verdicts.get(q.id)
                mark = {True: "✅", False: "❌", None: "⏳"}[verdict]
                st.markdown(f"**{q.text}**  \n{mark} {answer}")
                if has_key:
                    st.caption(f"Fasit: {key.get(str(q.id), '-')}")
