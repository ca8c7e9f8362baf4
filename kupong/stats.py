from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from kupong.config import DEFAULT_POLICY, LEADERBOARD_SIZE, ScoringPolicy
from kupong.identity import short_device_id
from kupong.models import as_utc
from kupong.scoring import answer_key, score_submission


@dataclass
class PlayerStats:
    games_played: int = 0
    total_correct: int = 0
    total_points: float = 0
    total_questions: int = 0
    avg_score_percent: float = 0.0
    wins: int = 0
    device_id: str = ""
    name: str = ""


@dataclass
class Leaderboards:
    by_wins: List[PlayerStats] = field(default_factory=list)
    by_avg_score: List[PlayerStats] = field(default_factory=list)
    by_total_correct: List[PlayerStats] = field(default_factory=list)


def _by_coupon(rows: Iterable) -> Dict[int, list]:
    grouped = defaultdict(list)
    for row in rows:
        grouped[row.coupon_id].append(row)
    return grouped


def aggregate_player_stats(
    submissions: Iterable,
    all_questions: Iterable,
    all_correct_answers: Iterable,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> PlayerStats:
    """Fold one participant's submissions into cumulative totals.

    Coupons without any correct answer yet are left out of games, correct
    answers, points and the average, so pending coupons do not pull the
    percentage down. Wins come from the stored winner flag.
    """
    questions_by_coupon = _by_coupon(all_questions)
    keys_by_coupon = {cid: answer_key(rows) for cid, rows in _by_coupon(all_correct_answers).items()}
    stats = PlayerStats()

    for sub in submissions:
        if sub.is_winner:
            stats.wins += 1
        key = keys_by_coupon.get(sub.coupon_id)
        if not key:
            continue
        questions = questions_by_coupon.get(sub.coupon_id, [])
        score = score_submission(sub, questions, key, policy)
        stats.games_played += 1
        stats.total_correct += score.correct_count
        stats.total_points += score.points
        stats.total_questions += score.total_questions

    if stats.total_questions > 0:
        stats.avg_score_percent = 100 * stats.total_correct / stats.total_questions
    return stats


def group_by_participant(submissions: Iterable) -> Dict[str, list]:
    grouped = defaultdict(list)
    for sub in submissions:
        grouped[sub.device_id].append(sub)
    return dict(grouped)


def participant_name(submissions: List) -> str:
    """Name from the newest submission that has one."""
    for sub in sorted(submissions, key=lambda s: as_utc(s.created_at), reverse=True):
        if sub.player_name and sub.player_name.strip():
            return sub.player_name.strip()
    return short_device_id(submissions[0].device_id) if submissions else ""


def all_players_stats(submissions, questions, correct_answers, policy: ScoringPolicy = DEFAULT_POLICY) -> List[PlayerStats]:
    questions = list(questions)
    correct_answers = list(correct_answers)
    players = []
    for device_id, subs in group_by_participant(submissions).items():
        stats = aggregate_player_stats(subs, questions, correct_answers, policy)
        stats.device_id = device_id
        stats.name = participant_name(subs)
        players.append(stats)
    players.sort(key=lambda p: p.name.lower())
    return players


def _top(players: List[PlayerStats], attr: str, limit: int) -> List[PlayerStats]:
    ranked = [p for p in players if getattr(p, attr) > 0]
    ranked.sort(key=lambda p: getattr(p, attr), reverse=True)
    return ranked[:limit]


def build_leaderboards(submissions, questions, correct_answers, limit: int = LEADERBOARD_SIZE, policy: ScoringPolicy = DEFAULT_POLICY) -> Leaderboards:
    players = all_players_stats(submissions, questions, correct_answers, policy)
    return Leaderboards(
        by_wins=_top(players, "wins", limit),
        by_avg_score=_top(players, "avg_score_percent", limit),
        by_total_correct=_top(players, "total_correct", limit),
    )


def get_all_players_stats(policy: ScoringPolicy = DEFAULT_POLICY) -> List[PlayerStats]:
    from kupong.coupons import list_correct_answers, list_questions
    from kupong.submissions import list_submissions
    return all_players_stats(list_submissions(), list_questions(), list_correct_answers(), policy)


def get_global_leaderboards(limit: int = LEADERBOARD_SIZE, policy: ScoringPolicy = DEFAULT_POLICY) -> Leaderboards:
    from kupong.coupons import list_correct_answers, list_questions
    from kupong.submissions import list_submissions
    return build_leaderboards(list_submissions(), list_questions(), list_correct_answers(), limit, policy)


def get_player_stats(device_id: str, policy: ScoringPolicy = DEFAULT_POLICY) -> PlayerStats:
    from kupong.coupons import list_correct_answers, list_questions
    from kupong.submissions import list_submissions_for_device
    subs = list_submissions_for_device(device_id)
    stats = aggregate_player_stats(subs, list_questions(), list_correct_answers(), policy)
    stats.device_id = device_id
    stats.name = participant_name(subs)
    return stats
