"""Odds to points conversion.

Short odds (favourites) give few points, long odds (underdogs) give more:

    points = 1 + 3 * ln(odds)

rounded down up to and including 10.5 and rounded up above it, so that
very long shots are rounded generously instead of truncated.

    1.20 -> 1, 2.00 -> 3, 5.00 -> 5, 10.00 -> 7
"""
import logging
import math
from dataclasses import dataclass

from kupong.config import DEFAULT_POLICY, ScoringPolicy

logger = logging.getLogger(__name__)

BASE_POINTS = 1
MULTIPLIER = 3
ROUNDING_THRESHOLD = 10.5
POINTS_SUFFIX = "p"
DRAW_LABEL = "Uavgjort"


class InvalidOdds(ValueError):
    pass


@dataclass(frozen=True)
class MatchOdds:
    home_win: float
    draw: float
    away_win: float


@dataclass(frozen=True)
class MatchPoints:
    home_win: int
    draw: int
    away_win: int


def _round_points(raw: float) -> int:
    if raw <= ROUNDING_THRESHOLD:
        return math.floor(raw)
    return math.ceil(raw)


def odds_to_points(odds) -> int:
    try:
        value = float(odds)
    except (TypeError, ValueError):
        raise InvalidOdds(f"Odds must be a number, got {odds!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidOdds(f"Odds must be a positive finite number, got {odds!r}")
    return _round_points(BASE_POINTS + math.log(value) * MULTIPLIER)


def points_or_default(odds, policy: ScoringPolicy = DEFAULT_POLICY):
    """Convert odds, falling back to the default point value on bad input."""
    try:
        return odds_to_points(odds)
    except InvalidOdds:
        logger.warning("Invalid odds %r, using %s point(s)", odds, policy.default_point_value)
        return policy.default_point_value


def format_points_label(points) -> str:
    # round half away from zero, builtin round() would give "2p" for 2.5
    return f"{math.floor(float(points) + 0.5)}{POINTS_SUFFIX}"


def translate_odds_to_points(odds: MatchOdds) -> MatchPoints:
    return MatchPoints(
        home_win=odds_to_points(odds.home_win),
        draw=odds_to_points(odds.draw),
        away_win=odds_to_points(odds.away_win),
    )


def create_options_with_points(home_team: str, away_team: str, points: MatchPoints):
    """Answer options for a 1X2 match question, labelled with their point values."""
    return [
        f"{home_team} ({format_points_label(points.home_win)})",
        f"{DRAW_LABEL} ({format_points_label(points.draw)})",
        f"{away_team} ({format_points_label(points.away_win)})",
    ]


def create_points_array(points: MatchPoints):
    return [points.home_win, points.draw, points.away_win]
