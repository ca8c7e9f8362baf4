from typing import Dict, List, Optional
from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone

def now_utc():
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands datetimes back naive; treat those as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

class Coupon(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    deadline: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=now_utc)

class Question(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    coupon_id: int = Field(foreign_key="coupon.id", index=True)
    text: str
    options: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # parallel to options; None means every option is worth the default point value
    option_points: Optional[List[float]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    nt_match_id: Optional[str] = None

class CorrectAnswer(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("coupon_id", "question_id", name="uq_correct_answer_question"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    coupon_id: int = Field(foreign_key="coupon.id", index=True)
    question_id: int = Field(foreign_key="question.id")
    correct_answer: str

class Submission(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("coupon_id", "device_id", name="uq_submission_device"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    coupon_id: int = Field(foreign_key="coupon.id", index=True)
    device_id: str = Field(index=True)
    player_name: Optional[str] = None
    answers: Dict[str, str] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))  # question_id -> option
    created_at: datetime = Field(default_factory=now_utc)
    is_winner: bool = Field(default=False)
