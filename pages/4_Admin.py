import logging
from datetime import datetime, time, timedelta, timezone
import streamlit as st

from kupong.app_state import init_app, get_notifier
from kupong.ui import apply_global_styles, render_sidebar, render_hero, render_admin_gate
from kupong.coupons import (
    QuestionValidationError,
    add_question,
    create_coupon,
    delete_coupon,
    delete_question,
    list_coupons,
    list_correct_answers,
    list_questions,
    update_coupon_title,
)
from kupong.models import as_utc
from kupong.results import clear_correct_answers, display_name, save_correct_answer, update_winners
from kupong.scoring import answer_key
from kupong.submissions import admin_delete_submission, list_submissions

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Admin", page_icon="\U0001f6e0", layout="wide")

init_app()
apply_global_styles()
render_sidebar()

render_hero("Adminpanel", "Lag kuponger, legg inn spørsmål og sett fasit.")

render_admin_gate()

notifier = get_notifier()

st.subheader("Ny kupong")
col1, col2, col3 = st.columns([3, 1, 1])
with col1:
    new_title = st.text_input("Tittel", key="new_coupon_title")
with col2:
    new_date = st.date_input("Frist (dato)", value=datetime.now(timezone.utc).date() + timedelta(days=7))
with col3:
    new_time = st.time_input("Frist (UTC)", value=time(18, 0))
if st.button("Opprett kupong", type="primary"):
    try:
        deadline = datetime.combine(new_date, new_time, tzinfo=timezone.utc)
        coupon = create_coupon(new_title, deadline)
        st.success(f"Kupong opprettet: {coupon.title}")
        st.rerun()
    except ValueError as e:
        st.warning(str(e))
    except Exception:
        logger.exception("Kupong oppretting feilet")
        st.error("Kunne ikke opprette kupong.")

st.divider()

coupons = list_coupons()
if not coupons:
    st.info("Ingen kuponger enda.")
    st.stop()

coupon_map = {f"{c.title} ({as_utc(c.deadline):%d.%m.%Y %H:%M})": c for c in coupons}
sel = st.selectbox("Velg kupong", list(coupon_map.keys()))
coupon = coupon_map[sel]

tab_questions, tab_facit, tab_submissions, tab_settings = st.tabs(["Spørsmål", "Fasit", "Innleveringer", "Innstillinger"])

with tab_questions:
    st.subheader("Legg til spørsmål")
    q_text = st.text_input("Spørsmål", key=f"q_text_{coupon.id}")
    q_options = st.text_area("Svaralternativer (ett per linje)", key=f"q_opts_{coupon.id}")
    q_points = st.text_area(
        "Poeng per alternativ (ett per linje, valgfritt)",
        key=f"q_points_{coupon.id}",
        help="Tomme eller ugyldige verdier gir 1 poeng.",
    )
    if st.button("Legg til spørsmål"):
        options = q_options.splitlines()
        points = q_points.splitlines() if q_points.strip() else None
        try:
            question, warnings = add_question(coupon.id, q_text, options, option_points=points)
            for w in warnings:
                st.warning(w)
            st.success("Spørsmål lagt til!")
        except QuestionValidationError as e:
            st.warning(e.reason.message)
        except Exception:
            logger.exception("Sporsmal kunne ikke lagres")
            st.error("Kunne ikke legge til spørsmål.")

    st.subheader("Spørsmål i kupongen")
    questions = list_questions(coupon.id)
    if not questions:
        st.caption("Ingen spørsmål enda.")
    for i, q in enumerate(questions, 1):
        c1, c2 = st.columns([5, 1])
        with c1:
            points = q.option_points or [None] * len(q.options)
            opts = ", ".join(f"{o} ({p:g}p)" if p else f"{o} (1p)" for o, p in zip(q.options, points))
            st.markdown(f"**{i}. {q.text}**  \n{opts}")
        with c2:
            if st.button("Slett", key=f"del_q_{q.id}"):
                try:
                    delete_question(q.id)
                    update_winners(coupon.id, notifier)
                    st.rerun()
                except Exception:
                    logger.exception("Sporsmal sletting feilet")
                    st.error("Kunne ikke slette spørsmålet.")

with tab_facit:
    questions = list_questions(coupon.id)
    key = answer_key(list_correct_answers(coupon.id))
    if not questions:
        st.caption("Legg til spørsmål først.")
    for q in questions:
        current = key.get(str(q.id))
        choice = st.radio(
            q.text,
            q.options,
            index=q.options.index(current) if current in q.options else None,
            key=f"facit_{coupon.id}_{q.id}",
            horizontal=True,
        )
        if choice and choice != current:
            try:
                save_correct_answer(coupon.id, q.id, choice, notifier)
                st.toast(f"Fasit lagret: {q.text}")
            except Exception as e:
                logger.exception("Fasit lagring feilet")
                st.error(f"Kunne ikke lagre fasit: {e}")

    if st.button("Tøm fasit", type="secondary"):
        try:
            removed = clear_correct_answers(coupon.id, notifier)
            for k in [k for k in st.session_state.keys() if str(k).startswith(f"facit_{coupon.id}_")]:
                del st.session_state[k]
            if removed:
                st.success(f"{removed} fasitsvar ble slettet.")
            else:
                st.info("Ingen fasit å tømme.")
        except Exception as e:
            logger.exception("Fasit sletting feilet")
            st.error(f"Kunne ikke tømme fasit: {e}")

with tab_submissions:
    submissions = list_submissions(coupon.id)
    st.metric("Innleveringer", len(submissions))
    for sub in submissions:
        c1, c2 = st.columns([5, 1])
        with c1:
            st.write(f"{'🏅 ' if sub.is_winner else ''}{display_name(sub)} · levert {as_utc(sub.created_at):%d.%m %H:%M}")
        with c2:
            if st.button("Slett", key=f"del_sub_{sub.id}"):
                try:
                    admin_delete_submission(sub.id)
                    update_winners(coupon.id, notifier)
                    st.rerun()
                except Exception:
                    logger.exception("Innlevering sletting feilet")
                    st.error("Kunne ikke slette innleveringen.")

with tab_settings:
    title = st.text_input("Tittel", value=coupon.title, key=f"edit_title_{coupon.id}")
    if st.button("Lagre tittel"):
        try:
            update_coupon_title(coupon.id, title)
            st.rerun()
        except ValueError as e:
            st.warning(str(e))
        except Exception:
            logger.exception("Kupong oppdatering feilet")
            st.error("Kunne ikke oppdatere tittelen.")

    st.warning("Sletting fjerner også spørsmål, fasit og innleveringer. Kan ikke angres.")
    if st.button("Slett kupong"):
        try:
            delete_coupon(coupon.id)
            notifier.notify(coupon.id)
            st.rerun()
        except Exception:
            logger.exception("Kupong sletting feilet")
            st.error("Kunne ikke slette kupongen.")
