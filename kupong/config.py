import os
from dataclasses import dataclass


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./kupong.db")

# Participants may edit or delete their coupon until this many minutes before the deadline
EDIT_CUTOFF_MINUTES = int(os.getenv("KUPONG_EDIT_CUTOFF_MINUTES", "5"))

LEADERBOARD_SIZE = int(os.getenv("KUPONG_LEADERBOARD_SIZE", "10"))

LOG_LEVEL = os.getenv("KUPONG_LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class ScoringPolicy:
    """Point value used wherever an option has no explicit weight."""

    default_point_value: float = 1


DEFAULT_POLICY = ScoringPolicy()


def admin_password_hash():
    return os.getenv("KUPONG_ADMIN_PASSWORD_HASH")


def admin_password():
    return os.getenv("KUPONG_ADMIN_PASSWORD")
