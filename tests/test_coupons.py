from datetime import datetime, timedelta, timezone

import pytest

from kupong.coupons import (
    QuestionValidationError,
    add_odds_question,
    add_question,
    create_coupon,
    delete_correct_answers,
    delete_coupon,
    delete_question,
    get_coupon,
    list_active_coupons,
    list_correct_answers,
    list_questions,
    update_coupon_title,
    upsert_correct_answer,
)
from kupong.odds import MatchOdds
from kupong.submissions import list_submissions, submit_answers
from kupong.validation import ValidationError


def _future(days=7):
    return datetime.now(timezone.utc) + timedelta(days=days)


def test_create_and_rename_coupon():
    coupon = create_coupon('  Runde 1 ', _future())
    assert coupon.title == 'Runde 1'
    update_coupon_title(coupon.id, 'Runde 1 (Eliteserien)')
    assert get_coupon(coupon.id).title == 'Runde 1 (Eliteserien)'
    with pytest.raises(ValueError):
        update_coupon_title(coupon.id, '  ')
    with pytest.raises(ValueError):
        create_coupon('', _future())


def test_active_coupons_exclude_past_deadlines():
    past = create_coupon('Gammel runde', datetime.now(timezone.utc) - timedelta(hours=1))
    current = create_coupon('Aktiv runde', _future(1))
    active_ids = [c.id for c in list_active_coupons()]
    assert current.id in active_ids
    assert past.id not in active_ids


def test_add_question_validates():
    coupon = create_coupon('Validering', _future())
    with pytest.raises(QuestionValidationError) as exc:
        add_question(coupon.id, 'Hvem vinner?', ['Ja', 'Ja'])
    assert exc.value.reason is ValidationError.DUPLICATE_OPTIONS
    with pytest.raises(QuestionValidationError):
        add_question(coupon.id, '', ['A', 'B'])
    assert list_questions(coupon.id) == []


def test_add_question_with_points_and_warnings():
    coupon = create_coupon('Poeng', _future())
    question, warnings = add_question(coupon.id, ' Hvem scorer først? ', ['Haaland', '', 'Ødegaard', 'Ingen'], option_points=['4', '', 'x', '0'])
    assert question.text == 'Hvem scorer først?'
    assert question.options == ['Haaland', 'Ødegaard', 'Ingen']
    # the blank option and its entry are dropped together
    assert question.option_points == [4.0, 1, 1]
    assert len(warnings) == 2
    loaded = list_questions(coupon.id)[0]
    assert loaded.option_points == [4.0, 1, 1]


def test_question_without_points_keeps_none():
    coupon = create_coupon('Uten poeng', _future())
    question, warnings = add_question(coupon.id, 'Over 2.5 mål?', ['Ja', 'Nei'])
    assert question.option_points is None
    assert warnings == []


def test_add_odds_question():
    coupon = create_coupon('Odds', _future())
    question = add_odds_question(coupon.id, 'Brann', 'Viking', MatchOdds(2.0, 3.3, 10.0), nt_match_id='nt-1')
    assert question.text == 'Brann vs Viking'
    assert question.options == ['Brann (3p)', 'Uavgjort (4p)', 'Viking (7p)']
    assert question.option_points == [3, 4, 7]
    assert question.nt_match_id == 'nt-1'


def test_correct_answer_upsert_keeps_one_row_per_question():
    coupon = create_coupon('Fasit', _future())
    q, _ = add_question(coupon.id, 'Q1', ['A', 'B'])
    upsert_correct_answer(coupon.id, q.id, 'A')
    upsert_correct_answer(coupon.id, q.id, 'B')
    rows = list_correct_answers(coupon.id)
    assert len(rows) == 1
    assert rows[0].correct_answer == 'B'
    with pytest.raises(ValueError):
        upsert_correct_answer(coupon.id, q.id, 'C')
    assert delete_correct_answers(coupon.id) == 1
    assert delete_correct_answers(coupon.id) == 0


def test_delete_question_removes_its_correct_answer():
    coupon = create_coupon('Slett spørsmål', _future())
    q1, _ = add_question(coupon.id, 'Q1', ['A', 'B'])
    q2, _ = add_question(coupon.id, 'Q2', ['A', 'B'])
    upsert_correct_answer(coupon.id, q1.id, 'A')
    upsert_correct_answer(coupon.id, q2.id, 'B')
    delete_question(q1.id)
    assert [q.id for q in list_questions(coupon.id)] == [q2.id]
    assert [r.question_id for r in list_correct_answers(coupon.id)] == [q2.id]


def test_delete_coupon_cascades():
    coupon = create_coupon('Kaskade', _future())
    q, _ = add_question(coupon.id, 'Q1', ['A', 'B'])
    upsert_correct_answer(coupon.id, q.id, 'A')
    submit_answers(coupon.id, 'cascade-device', {q.id: 'A'}, player_name='Kari')

    assert delete_coupon(coupon.id)
    assert get_coupon(coupon.id) is None
    assert list_questions(coupon.id) == []
    assert list_correct_answers(coupon.id) == []
    assert list_submissions(coupon.id) == []
    with pytest.raises(ValueError):
        delete_coupon(coupon.id)
