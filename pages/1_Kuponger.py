import logging
import streamlit as st

from kupong.app_state import init_app, get_local_store, get_notifier, current_device_id
from kupong.ui import apply_global_styles, render_sidebar, render_hero
from kupong.coupons import list_active_coupons, list_questions
from kupong.identity import load_player_name, remember_player_name, mark_submitted, unmark_submitted
from kupong.models import as_utc
from kupong.odds import format_points_label
from kupong.config import DEFAULT_POLICY, EDIT_CUTOFF_MINUTES
from kupong.results import submit_coupon, withdraw_submission
from kupong.scoring import option_point_value
from kupong.submissions import SubmissionLocked, can_edit_or_delete, get_submission_for_device

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Kuponger", page_icon="📝", layout="wide")

init_app()
apply_global_styles()
render_sidebar()

render_hero("Aktive kuponger", "Velg en kupong, svar på alle spørsmålene og lever før fristen.")

# message from the action that triggered the last rerun
flash = st.session_state.pop("coupon_flash", None)
if flash:
    kind, text = flash
    getattr(st, kind)(text)

store = get_local_store()
device_id = current_device_id()

try:
    coupons = list_active_coupons()
except Exception:
    logger.exception("Kunne ikke hente kuponger")
    st.error("Kunne ikke hente kuponger. Prøv igjen.")
    st.stop()

if not coupons:
    st.info("Ingen aktive kuponger akkurat nå.")
    st.stop()

coupon_map = {f"{c.title} (frist {as_utc(c.deadline):%d.%m %H:%M} UTC)": c for c in coupons}
sel = st.selectbox("Kupong", list(coupon_map.keys()))
coupon = coupon_map[sel]

questions = list_questions(coupon.id)
submission = get_submission_for_device(coupon.id, device_id)
editable = can_edit_or_delete(coupon.deadline)

if submission:
    mark_submitted(store, coupon.id)
    st.success("Du har levert denne kupongen. Du kan endre svarene frem til fristen.")
    if not editable:
        st.warning(f"Mindre enn {EDIT_CUTOFF_MINUTES} minutter til fristen, kupongen er låst.")

if not questions:
    st.info("Kupongen har ingen spørsmål enda.")
    st.stop()

default_name = (submission.player_name if submission and submission.player_name else load_player_name(store))
player_name = st.text_input("Ditt navn", value=default_name, key=f"player_name_{coupon.id}")

previous = {str(k): v for k, v in (submission.answers or {}).items()} if submission else {}
answers = {}
for i, q in enumerate(questions, 1):
    labels = {opt: f"{opt} ({format_points_label(option_point_value(q, opt, DEFAULT_POLICY))})" for opt in q.options}
    current = previous.get(str(q.id))
    answers[str(q.id)] = st.radio(
        f"{i}. {q.text}",
        q.options,
        index=q.options.index(current) if current in q.options else None,
        format_func=lambda opt, labels=labels: labels.get(opt, opt),
        key=f"answer_{coupon.id}_{q.id}",
        disabled=bool(submission) and not editable,
    )

col1, col2 = st.columns(2)
with col1:
    label = "Oppdater kupong" if submission else "Lever kupong"
    if st.button(label, type="primary", disabled=bool(submission) and not editable):
        if not player_name.strip():
            st.warning("Skriv inn navnet ditt før du sender inn.")
        elif not all(answers.values()):
            st.warning("Besvar alle spørsmål før du sender inn.")
        else:
            try:
                result = submit_coupon(coupon.id, device_id, answers, player_name=player_name, notifier=get_notifier())
                remember_player_name(store, player_name)
                mark_submitted(store, coupon.id)
                if result.adopted:
                    st.session_state.coupon_flash = ("info", "Du har allerede levert denne kupongen.")
                elif result.created:
                    st.session_state.coupon_flash = ("success", "Kupong levert!")
                else:
                    st.session_state.coupon_flash = ("success", "Kupong oppdatert!")
                st.rerun()
            except SubmissionLocked:
                st.warning(f"Du kan ikke endre kupongen mindre enn {EDIT_CUTOFF_MINUTES} minutter før fristen.")
            except ValueError as e:
                st.warning(str(e))
            except Exception as e:
                logger.exception("Feil ved lagring av kupong")
                st.error(f"Kunne ikke lagre kupongen: {e}")

with col2:
    if submission and st.button("Slett kupong", disabled=not editable):
        try:
            withdraw_submission(coupon.id, submission.id, device_id, notifier=get_notifier())
            unmark_submitted(store, coupon.id)
            for key in [k for k in st.session_state.keys() if str(k).startswith(f"answer_{coupon.id}_")]:
                del st.session_state[key]
            st.session_state.coupon_flash = ("info", "Kupong slettet.")
            st.rerun()
        except SubmissionLocked:
            st.warning(f"Du kan ikke slette kupongen mindre enn {EDIT_CUTOFF_MINUTES} minutter før fristen.")
        except Exception as e:
            logger.exception("Feil ved sletting av kupong")
            st.error(f"Kunne ikke slette kupongen: {e}")
