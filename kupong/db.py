"""Database engine for coupons, questions, answer keys and submissions.

``DATABASE_URL`` picks the store; the default is ``kupong.db`` in the
working directory. Sessions keep loaded rows usable after commit
because pages and scoring read them once the session has closed.
"""
from sqlmodel import SQLModel, create_engine, Session

from kupong.config import DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Streamlit serves each session from its own thread
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def init_db():
    """Create the game tables if they are missing. Safe to call on every start."""
    import kupong.models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
