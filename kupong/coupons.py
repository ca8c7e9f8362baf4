from datetime import datetime
from typing import List, Optional, Sequence

from sqlmodel import select

from kupong.config import DEFAULT_POLICY, ScoringPolicy
from kupong.db import get_session
from kupong.models import Coupon, Question, CorrectAnswer, Submission, as_utc, now_utc
from kupong.odds import MatchOdds, create_options_with_points, create_points_array, translate_odds_to_points
from kupong.validation import ValidationError, clean_options, parse_option_points, validate_question


class QuestionValidationError(ValueError):
    def __init__(self, reason: ValidationError):
        super().__init__(reason.message)
        self.reason = reason


def create_coupon(title: str, deadline: datetime) -> Coupon:
    if not (title or "").strip():
        raise ValueError("Coupon title cannot be empty")
    with get_session() as session:
        coupon = Coupon(title=title.strip(), deadline=as_utc(deadline))
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon


def get_coupon(coupon_id: int) -> Optional[Coupon]:
    with get_session() as session:
        return session.get(Coupon, coupon_id)


def list_coupons():
    """All coupons, latest deadline first."""
    with get_session() as session:
        q = select(Coupon).order_by(Coupon.deadline.desc())
        return list(session.exec(q))


def is_active(coupon: Coupon, now: Optional[datetime] = None) -> bool:
    return (now or now_utc()) < as_utc(coupon.deadline)


def list_active_coupons(now: Optional[datetime] = None):
    now = now or now_utc()
    return sorted(
        (c for c in list_coupons() if is_active(c, now)),
        key=lambda c: as_utc(c.deadline),
    )


def update_coupon_title(coupon_id: int, title: str) -> Coupon:
    if not (title or "").strip():
        raise ValueError("Coupon title cannot be empty")
    with get_session() as session:
        coupon = session.get(Coupon, coupon_id)
        if not coupon:
            raise ValueError("Coupon not found")
        coupon.title = title.strip()
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon


def delete_coupon(coupon_id: int) -> bool:
    """Delete a coupon together with everything it owns."""
    with get_session() as session:
        coupon = session.get(Coupon, coupon_id)
        if not coupon:
            raise ValueError("Coupon not found")
        for model in (CorrectAnswer, Submission, Question):
            for row in list(session.exec(select(model).where(model.coupon_id == coupon_id))):
                session.delete(row)
        session.flush()
        session.delete(coupon)
        session.commit()
        return True


def add_question(
    coupon_id: int,
    text: str,
    options: Sequence[str],
    option_points: Optional[Sequence] = None,
    nt_match_id: Optional[str] = None,
    policy: ScoringPolicy = DEFAULT_POLICY,
):
    """Validate and store a question.

    option_points may hold raw admin input; bad entries fall back to the
    default point value. Returns (question, warnings).
    """
    reason = validate_question(text, options)
    if reason is not None:
        raise QuestionValidationError(reason)

    cleaned = clean_options(options)
    points = None
    warnings: List[str] = []
    if option_points is not None:
        raw_points = list(option_points)
        # keep each point entry next to its option when blank options are dropped
        kept = [raw_points[i] if i < len(raw_points) else None for i, o in enumerate(options) if o and o.strip()]
        points, warnings = parse_option_points(kept, len(cleaned), policy)

    with get_session() as session:
        if not session.get(Coupon, coupon_id):
            raise ValueError("Coupon not found")
        question = Question(
            coupon_id=coupon_id,
            text=text.strip(),
            options=cleaned,
            option_points=points,
            nt_match_id=nt_match_id,
        )
        session.add(question)
        session.commit()
        session.refresh(question)
        return question, warnings


def add_odds_question(coupon_id: int, home_team: str, away_team: str, odds: MatchOdds, nt_match_id: Optional[str] = None):
    """Add a home/draw/away question whose option points come from the odds."""
    points = translate_odds_to_points(odds)
    question, _ = add_question(
        coupon_id,
        f"{home_team} vs {away_team}",
        create_options_with_points(home_team, away_team, points),
        option_points=create_points_array(points),
        nt_match_id=nt_match_id,
    )
    return question


def delete_question(question_id: int) -> bool:
    with get_session() as session:
        question = session.get(Question, question_id)
        if not question:
            raise ValueError("Question not found")
        for row in list(session.exec(select(CorrectAnswer).where(CorrectAnswer.question_id == question_id))):
            session.delete(row)
        session.flush()
        session.delete(question)
        session.commit()
        return True


def list_questions(coupon_id: Optional[int] = None):
    with get_session() as session:
        q = select(Question)
        if coupon_id is not None:
            q = q.where(Question.coupon_id == coupon_id)
        return list(session.exec(q.order_by(Question.id)))


def list_correct_answers(coupon_id: Optional[int] = None):
    with get_session() as session:
        q = select(CorrectAnswer)
        if coupon_id is not None:
            q = q.where(CorrectAnswer.coupon_id == coupon_id)
        return list(session.exec(q))


def upsert_correct_answer(coupon_id: int, question_id: int, value: str) -> CorrectAnswer:
    with get_session() as session:
        question = session.get(Question, question_id)
        if not question or question.coupon_id != coupon_id:
            raise ValueError("Question not found in coupon")
        if value not in question.options:
            raise ValueError("Correct answer must be one of the question's options")
        q = select(CorrectAnswer).where(
            CorrectAnswer.coupon_id == coupon_id,
            CorrectAnswer.question_id == question_id,
        )
        existing = session.exec(q).first()
        if existing:
            existing.correct_answer = value
            row = existing
        else:
            row = CorrectAnswer(coupon_id=coupon_id, question_id=question_id, correct_answer=value)
        session.add(row)
        session.commit()
        session.refresh(row)
        return row


def delete_correct_answers(coupon_id: int) -> int:
    """Clear the answer key for a coupon. Returns the number of rows removed."""
    with get_session() as session:
        rows = list(session.exec(select(CorrectAnswer).where(CorrectAnswer.coupon_id == coupon_id)))
        for row in rows:
            session.delete(row)
        session.commit()
        return len(rows)
