import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from kupong.config import DEFAULT_POLICY, ScoringPolicy
from kupong.coupons import delete_correct_answers, list_correct_answers, list_questions, upsert_correct_answer
from kupong.identity import short_device_id
from kupong.notifier import ChangeNotifier
from kupong.scoring import Score, answer_key, resolve_winners, score_submission
from kupong.submissions import SubmitResult, delete_submission, list_submissions, set_winner_flags, submit_answers

logger = logging.getLogger(__name__)


@dataclass
class PlayerResult:
    submission_id: int
    name: str
    answers: Dict[str, str]
    score: Score
    is_winner: bool


def display_name(submission) -> str:
    return submission.player_name or short_device_id(submission.device_id)


def update_winners(coupon_id: int, notifier: Optional[ChangeNotifier] = None, policy: ScoringPolicy = DEFAULT_POLICY) -> Dict[int, bool]:
    """Recompute and persist the winner flags of a coupon.

    Called whenever the answer key or a graded submission changes. Store
    errors propagate; the change notification afterwards is best effort.
    """
    submissions = list_submissions(coupon_id)
    if not submissions:
        logger.info("No submissions for coupon %s", coupon_id)
        flags = {}
    else:
        flags = resolve_winners(submissions, list_questions(coupon_id), list_correct_answers(coupon_id), policy)
        winners = set_winner_flags(coupon_id, flags)
        logger.info("Updated winners for coupon %s: %s winner(s)", coupon_id, winners)

    if notifier is not None:
        try:
            notifier.notify(coupon_id)
        except Exception:
            logger.exception("Results notification failed for coupon %s", coupon_id)
    return flags


def save_correct_answer(coupon_id: int, question_id: int, value: str, notifier: Optional[ChangeNotifier] = None):
    row = upsert_correct_answer(coupon_id, question_id, value)
    update_winners(coupon_id, notifier)
    return row


def clear_correct_answers(coupon_id: int, notifier: Optional[ChangeNotifier] = None) -> int:
    removed = delete_correct_answers(coupon_id)
    update_winners(coupon_id, notifier)
    return removed


def coupon_results(coupon_id: int, policy: ScoringPolicy = DEFAULT_POLICY):
    """Scores for every submission of a coupon, best first once graded.

    Returns (results, has_answer_key). Winners are recomputed here rather
    than read from the stored flags so the view is never stale.
    """
    questions = list_questions(coupon_id)
    key = answer_key(list_correct_answers(coupon_id))
    submissions = list_submissions(coupon_id)
    flags = resolve_winners(submissions, questions, key, policy)

    results: List[PlayerResult] = [
        PlayerResult(
            submission_id=sub.id,
            name=display_name(sub),
            answers={str(k): v for k, v in (sub.answers or {}).items()},
            score=score_submission(sub, questions, key, policy),
            is_winner=flags.get(sub.id, False),
        )
        for sub in submissions
    ]
    has_key = bool(key)
    if has_key:
        results.sort(key=lambda r: r.score.points, reverse=True)
    return results, has_key


def submit_coupon(
    coupon_id: int,
    device_id: str,
    answers,
    player_name: Optional[str] = None,
    notifier: Optional[ChangeNotifier] = None,
    now=None,
) -> SubmitResult:
    """Participant submit or edit; winners follow if the coupon is already graded."""
    result = submit_answers(coupon_id, device_id, answers, player_name=player_name, now=now)
    if not result.adopted and list_correct_answers(coupon_id):
        update_winners(coupon_id, notifier)
    return result


def withdraw_submission(
    coupon_id: int,
    submission_id: int,
    device_id: str,
    notifier: Optional[ChangeNotifier] = None,
    now=None,
) -> bool:
    deleted = delete_submission(submission_id, device_id, now=now)
    if list_correct_answers(coupon_id):
        update_winners(coupon_id, notifier)
    return deleted
