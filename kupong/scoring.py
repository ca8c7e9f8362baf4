from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from kupong.config import DEFAULT_POLICY, ScoringPolicy


@dataclass
class Score:
    correct_count: int = 0
    total_questions: int = 0
    points: float = 0
    # question_id -> True (correct) / False (wrong or unanswered) / None (not graded yet)
    verdicts: Dict[int, Optional[bool]] = field(default_factory=dict)

    @property
    def graded_questions(self) -> int:
        return sum(1 for v in self.verdicts.values() if v is not None)


def answer_key(correct_answers) -> Dict[str, str]:
    """Normalize correct answers to {str(question_id): value}.

    Accepts a mapping question_id -> value or an iterable of rows with
    question_id / correct_answer attributes (or dict keys).
    """
    if correct_answers is None:
        return {}
    if isinstance(correct_answers, Mapping):
        items = correct_answers.items()
    else:
        items = []
        for row in correct_answers:
            if isinstance(row, Mapping):
                items.append((row.get('question_id'), row.get('correct_answer')))
            else:
                items.append((row.question_id, row.correct_answer))
    return {str(qid): value for qid, value in items if qid is not None and value}


def _answers_of(submission) -> Mapping[str, Any]:
    answers = submission.get('answers') if isinstance(submission, Mapping) else getattr(submission, 'answers', None)
    if not answers:
        return {}
    return {str(k): v for k, v in answers.items()}


def option_point_value(question, option: str, policy: ScoringPolicy = DEFAULT_POLICY):
    """Points awarded for picking `option` on `question`."""
    option_points = getattr(question, 'option_points', None)
    if not option_points:
        return policy.default_point_value
    try:
        value = option_points[list(question.options).index(option)]
        if value is None or value <= 0:
            return policy.default_point_value
    except (ValueError, IndexError, TypeError):
        return policy.default_point_value
    return value


def score_submission(
    submission,
    questions: Sequence,
    correct_answers,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> Score:
    key = answer_key(correct_answers)
    answers = _answers_of(submission)
    score = Score(total_questions=len(questions))

    for q in questions:
        qid = str(q.id)
        correct = key.get(qid)
        if not correct:
            score.verdicts[q.id] = None
            continue
        provided = answers.get(qid)
        if provided is not None and provided == correct:
            score.correct_count += 1
            score.points += option_point_value(q, provided, policy)
            score.verdicts[q.id] = True
        else:
            score.verdicts[q.id] = False

    return score


def resolve_winners(
    submissions: Iterable,
    questions: Sequence,
    correct_answers,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> Dict[int, bool]:
    """Map every submission id to its winner flag.

    Everyone tied on the highest point total wins. Without any correct
    answers nobody has won yet.
    """
    submissions = list(submissions)
    key = answer_key(correct_answers)
    if not key:
        return {s.id: False for s in submissions}

    # rounded so fractional option points summed in different orders still tie
    points = {s.id: round(score_submission(s, questions, key, policy).points, 9) for s in submissions}
    if not points:
        return {}
    top_score = max(points.values())
    return {sid: p == top_score for sid, p in points.items()}

