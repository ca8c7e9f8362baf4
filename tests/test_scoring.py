from kupong.config import ScoringPolicy
from kupong.models import CorrectAnswer, Question, Submission
from kupong.scoring import answer_key, option_point_value, resolve_winners, score_submission


def _q(qid, options, points=None, coupon_id=1):
    return Question(id=qid, coupon_id=coupon_id, text=f"Q{qid}", options=options, option_points=points)


def _s(sid, answers, coupon_id=1, device_id=None):
    return Submission(id=sid, coupon_id=coupon_id, device_id=device_id or f"dev-{sid}", answers=answers)


def test_score_counts_correct_and_total():
    questions = [_q(1, ["A", "B"]), _q(2, ["B", "C"])]
    score = score_submission(_s(1, {"1": "A", "2": "C"}), questions, {1: "A", 2: "B"})
    assert score.correct_count == 1
    assert score.total_questions == 2
    assert score.points == 1
    assert score.verdicts == {1: True, 2: False}


def test_weighted_points():
    questions = [_q(1, ["A", "B"], [3, 1]), _q(2, ["B", "C"])]
    score = score_submission(_s(1, {"1": "A", "2": "C"}), questions, {1: "A", 2: "B"})
    assert score.points == 3


def test_ungraded_questions_are_pending():
    questions = [_q(1, ["A", "B"]), _q(2, ["X", "Y"])]
    score = score_submission(_s(1, {"1": "A", "2": "X"}), questions, {1: "A"})
    assert score.correct_count == 1
    assert score.total_questions == 2
    assert score.verdicts[2] is None
    assert score.graded_questions == 1


def test_unanswered_never_matches():
    questions = [_q(1, ["A", "B"])]
    score = score_submission(_s(1, {}), questions, {1: "A"})
    assert score.correct_count == 0
    assert score.points == 0
    assert score.verdicts[1] is False


def test_match_is_case_sensitive():
    questions = [_q(1, ["Ja", "ja"])]
    assert score_submission(_s(1, {"1": "ja"}), questions, {1: "Ja"}).correct_count == 0


def test_integer_answer_keys_are_accepted():
    questions = [_q(7, ["A", "B"], [2, 5])]
    score = score_submission(_s(1, {7: "B"}), questions, {"7": "B"})
    assert score.points == 5


def test_answer_key_from_rows():
    rows = [
        CorrectAnswer(coupon_id=1, question_id=1, correct_answer="A"),
        CorrectAnswer(coupon_id=1, question_id=2, correct_answer="X"),
    ]
    assert answer_key(rows) == {"1": "A", "2": "X"}
    assert answer_key([{"question_id": 3, "correct_answer": "Y"}]) == {"3": "Y"}
    assert answer_key(None) == {}


def test_malformed_option_points_fall_back_to_default():
    short = _q(1, ["A", "B", "C"], [4])
    assert option_point_value(short, "A") == 4
    assert option_point_value(short, "C") == 1
    # the correct answer is not one of the options anymore
    assert option_point_value(short, "Z") == 1
    zero = _q(2, ["A", "B"], [0, 2])
    assert option_point_value(zero, "A") == 1
    assert option_point_value(zero, "A", ScoringPolicy(default_point_value=3)) == 3


def test_score_never_raises_on_unknown_option():
    questions = [_q(1, ["A", "B"], [3, 1])]
    score = score_submission(_s(1, {"1": "Z"}), questions, {1: "Z"})
    assert score.correct_count == 1
    assert score.points == 1


def test_no_winners_without_answer_key():
    questions = [_q(1, ["A", "B"])]
    subs = [_s(1, {"1": "A"}), _s(2, {"1": "B"})]
    assert resolve_winners(subs, questions, {}) == {1: False, 2: False}
    assert resolve_winners(subs, questions, []) == {1: False, 2: False}


def test_ties_at_the_top_all_win():
    questions = [_q(1, ["A", "B"]), _q(2, ["X", "Y"])]
    subs = [
        _s(1, {"1": "A", "2": "Y"}),
        _s(2, {"1": "B", "2": "X"}),
        _s(3, {"1": "B", "2": "Y"}),
    ]
    flags = resolve_winners(subs, questions, {1: "A", 2: "X"})
    assert flags == {1: True, 2: True, 3: False}


def test_winners_follow_points_not_correct_count():
    questions = [_q(1, ["A", "B"], [5, 1]), _q(2, ["X", "Y"]), _q(3, ["M", "N"])]
    subs = [
        _s(1, {"1": "A", "2": "Y", "3": "N"}),  # 1 correct, 5 points
        _s(2, {"1": "B", "2": "X", "3": "M"}),  # 2 correct, 2 points
    ]
    flags = resolve_winners(subs, questions, {1: "A", 2: "X", 3: "M"})
    assert flags == {1: True, 2: False}


def test_everyone_zero_means_everyone_wins():
    questions = [_q(1, ["A", "B"])]
    subs = [_s(1, {"1": "B"}), _s(2, {"1": "B"})]
    assert resolve_winners(subs, questions, {1: "A"}) == {1: True, 2: True}


def test_resolve_is_idempotent():
    questions = [_q(1, ["A", "B"], [2, 1])]
    subs = [_s(1, {"1": "A"}), _s(2, {"1": "B"})]
    key = {1: "A"}
    assert resolve_winners(subs, questions, key) == resolve_winners(subs, questions, key)


def test_resolve_without_submissions():
    assert resolve_winners([], [_q(1, ["A", "B"])], {1: "A"}) == {}


def test_end_to_end_scenario():
    questions = [_q(1, ["A", "B"], [2, 1]), _q(2, ["X", "Y"])]
    s1 = _s(1, {"1": "A", "2": "X"})
    s2 = _s(2, {"1": "B", "2": "X"})
    key = {1: "A", 2: "X"}

    score1 = score_submission(s1, questions, key)
    score2 = score_submission(s2, questions, key)
    assert (score1.correct_count, score1.points) == (2, 3)
    assert (score2.correct_count, score2.points) == (1, 1)
    assert resolve_winners([s1, s2], questions, key) == {1: True, 2: False}
