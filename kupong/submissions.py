import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from kupong.config import EDIT_CUTOFF_MINUTES
from kupong.db import get_session
from kupong.models import Coupon, Question, Submission, as_utc, now_utc

logger = logging.getLogger(__name__)


class SubmissionLocked(PermissionError):
    """Raised when a participant tries to change a coupon too close to its deadline."""


@dataclass
class SubmitResult:
    submission: Submission
    created: bool
    # True when a concurrent first submission from the same device won the insert
    adopted: bool = False


def can_edit_or_delete(deadline: datetime, now: Optional[datetime] = None, cutoff_minutes: int = EDIT_CUTOFF_MINUTES) -> bool:
    """More than `cutoff_minutes` left before the deadline."""
    now = now or now_utc()
    return as_utc(deadline) - now > timedelta(minutes=cutoff_minutes)


def list_submissions(coupon_id: Optional[int] = None):
    with get_session() as session:
        q = select(Submission)
        if coupon_id is not None:
            q = q.where(Submission.coupon_id == coupon_id)
        return list(session.exec(q.order_by(Submission.id)))


def list_submissions_for_device(device_id: str):
    with get_session() as session:
        q = select(Submission).where(Submission.device_id == device_id).order_by(Submission.created_at)
        return list(session.exec(q))


def get_submission_for_device(coupon_id: int, device_id: str) -> Optional[Submission]:
    with get_session() as session:
        q = select(Submission).where(Submission.coupon_id == coupon_id, Submission.device_id == device_id)
        return session.exec(q).first()


def _check_answers(session, coupon_id: int, answers: Mapping) -> Dict[str, str]:
    questions = list(session.exec(select(Question).where(Question.coupon_id == coupon_id)))
    normalized = {str(k): v for k, v in answers.items() if v}
    missing = [q for q in questions if str(q.id) not in normalized]
    if missing:
        raise ValueError("Every question must be answered before submitting")
    by_id = {str(q.id): q for q in questions}
    for qid, value in normalized.items():
        question = by_id.get(qid)
        if question is None:
            raise ValueError(f"Question {qid} does not belong to this coupon")
        if value not in question.options:
            raise ValueError(f"{value!r} is not an option for question {qid}")
    return normalized


def submit_answers(
    coupon_id: int,
    device_id: str,
    answers: Mapping,
    player_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SubmitResult:
    """Create or replace the device's submission for a coupon."""
    now = now or now_utc()
    if not device_id:
        raise ValueError("Missing device id")
    name = (player_name or "").strip()
    if not name:
        raise ValueError("Player name is required")

    with get_session() as session:
        coupon = session.get(Coupon, coupon_id)
        if not coupon:
            raise ValueError("Coupon not found")
        normalized = _check_answers(session, coupon_id, answers)

        q = select(Submission).where(Submission.coupon_id == coupon_id, Submission.device_id == device_id)
        existing = session.exec(q).first()
        if existing:
            if not can_edit_or_delete(coupon.deadline, now):
                raise SubmissionLocked("Submissions cannot be changed this close to the deadline")
            existing.answers = normalized
            existing.player_name = name
            session.add(existing)
            session.commit()
            session.refresh(existing)
            return SubmitResult(existing, created=False)

        if now >= as_utc(coupon.deadline):
            raise SubmissionLocked("The coupon deadline has passed")

        submission = Submission(coupon_id=coupon_id, device_id=device_id, player_name=name, answers=normalized)
        session.add(submission)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.info("Duplicate submission for coupon %s device %s, adopting existing row", coupon_id, device_id)
            adopted = session.exec(q).first()
            if adopted is None:
                raise
            return SubmitResult(adopted, created=False, adopted=True)
        session.refresh(submission)
        return SubmitResult(submission, created=True)


def delete_submission(submission_id: int, device_id: str, now: Optional[datetime] = None) -> bool:
    """Participant deletion, only for the owning device and before the cutoff."""
    with get_session() as session:
        submission = session.get(Submission, submission_id)
        if not submission:
            raise ValueError("Submission not found")
        if submission.device_id != device_id:
            raise PermissionError("Submission owner mismatch")
        coupon = session.get(Coupon, submission.coupon_id)
        if coupon and not can_edit_or_delete(coupon.deadline, now):
            raise SubmissionLocked("Submissions cannot be deleted this close to the deadline")
        session.delete(submission)
        session.commit()
        return True


def admin_delete_submission(submission_id: int) -> bool:
    with get_session() as session:
        submission = session.get(Submission, submission_id)
        if not submission:
            raise ValueError("Submission not found")
        session.delete(submission)
        session.commit()
        return True


def set_winner_flags(coupon_id: int, flags: Mapping[int, bool]) -> int:
    """Replace the winner flags of a coupon in one transaction.

    Everything is reset first so a previous winner that is no longer on top
    cannot keep its flag. Returns the number of winners set.
    """
    winner_ids = {sid for sid, is_winner in flags.items() if is_winner}
    with get_session() as session:
        rows = list(session.exec(select(Submission).where(Submission.coupon_id == coupon_id)))
        for row in rows:
            row.is_winner = False
            session.add(row)
        session.flush()
        for row in rows:
            if row.id in winner_ids:
                row.is_winner = True
                session.add(row)
        session.commit()
        return sum(1 for row in rows if row.is_winner)
