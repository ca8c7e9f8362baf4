from datetime import datetime, timedelta, timezone

from kupong.coupons import add_question, create_coupon, list_correct_answers, list_questions
from kupong.notifier import ChangeNotifier
from kupong.results import (
    clear_correct_answers,
    coupon_results,
    save_correct_answer,
    submit_coupon,
    update_winners,
    withdraw_submission,
)
from kupong.stats import get_global_leaderboards, get_player_stats
from kupong.submissions import list_submissions, submit_answers


def _setup(title):
    coupon = create_coupon(title, datetime.now(timezone.utc) + timedelta(days=3))
    q1, _ = add_question(coupon.id, 'Q1', ['A', 'B'], option_points=['2', '1'])
    q2, _ = add_question(coupon.id, 'Q2', ['X', 'Y'])
    return coupon, q1, q2


def _flags(coupon_id):
    return {s.device_id: s.is_winner for s in list_submissions(coupon_id)}


def test_end_to_end_winners_are_persisted_and_signalled():
    coupon, q1, q2 = _setup('E2E')
    submit_answers(coupon.id, 'e2e-s1', {q1.id: 'A', q2.id: 'X'}, player_name='S1')
    submit_answers(coupon.id, 'e2e-s2', {q1.id: 'B', q2.id: 'X'}, player_name='S2')
    notifier = ChangeNotifier()
    signalled = []
    notifier.subscribe(signalled.append)

    save_correct_answer(coupon.id, q1.id, 'A', notifier)
    save_correct_answer(coupon.id, q2.id, 'X', notifier)

    assert _flags(coupon.id) == {'e2e-s1': True, 'e2e-s2': False}
    assert signalled == [coupon.id, coupon.id]

    results, has_key = coupon_results(coupon.id)
    assert has_key
    assert [(r.name, r.score.correct_count, r.score.points, r.is_winner) for r in results] == [
        ('S1', 2, 3, True),
        ('S2', 1, 1, False),
    ]


def test_no_stale_winner_after_answer_key_change():
    coupon, q1, q2 = _setup('Stale')
    submit_answers(coupon.id, 'stale-s1', {q1.id: 'A', q2.id: 'Y'}, player_name='S1')
    submit_answers(coupon.id, 'stale-s2', {q1.id: 'B', q2.id: 'X'}, player_name='S2')

    save_correct_answer(coupon.id, q1.id, 'A')
    assert _flags(coupon.id) == {'stale-s1': True, 'stale-s2': False}

    # the admin corrects the key; the previous winner drops below the top
    save_correct_answer(coupon.id, q1.id, 'B')
    assert _flags(coupon.id) == {'stale-s1': False, 'stale-s2': True}


def test_clearing_the_answer_key_removes_all_winners():
    coupon, q1, q2 = _setup('Tøm')
    submit_answers(coupon.id, 'clear-s1', {q1.id: 'A', q2.id: 'X'}, player_name='S1')
    save_correct_answer(coupon.id, q1.id, 'A')
    assert _flags(coupon.id) == {'clear-s1': True}

    assert clear_correct_answers(coupon.id) == 1
    assert list_correct_answers(coupon.id) == []
    assert _flags(coupon.id) == {'clear-s1': False}

    results, has_key = coupon_results(coupon.id)
    assert not has_key
    assert results[0].score.verdicts == {q.id: None for q in list_questions(coupon.id)}


def test_update_winners_is_idempotent_and_survives_notify_failure():
    coupon, q1, q2 = _setup('Idempotent')
    submit_answers(coupon.id, 'idem-s1', {q1.id: 'A', q2.id: 'X'}, player_name='S1')
    submit_answers(coupon.id, 'idem-s2', {q1.id: 'A', q2.id: 'X'}, player_name='S2')
    save_correct_answer(coupon.id, q2.id, 'X')

    class BrokenNotifier:
        def notify(self, coupon_id):
            raise RuntimeError("signal store down")

    first = update_winners(coupon.id, BrokenNotifier())
    second = update_winners(coupon.id)
    assert first == second
    assert set(first.values()) == {True}


def test_update_winners_without_submissions():
    coupon, q1, q2 = _setup('Tom')
    assert update_winners(coupon.id) == {}


def test_player_stats_from_store():
    graded, g1, g2 = _setup('Statistikk rettet')
    pending, p1, p2 = _setup('Statistikk venter')
    submit_answers(graded.id, 'stats-device', {g1.id: 'A', g2.id: 'X'}, player_name='Kari')
    submit_answers(pending.id, 'stats-device', {p1.id: 'A', p2.id: 'X'}, player_name='Kari Nordmann')
    save_correct_answer(graded.id, g1.id, 'A')
    save_correct_answer(graded.id, g2.id, 'X')

    stats = get_player_stats('stats-device')
    assert stats.games_played == 1
    assert stats.total_questions == 2
    assert stats.avg_score_percent == 100
    assert stats.total_points == 3
    assert stats.wins == 1
    assert stats.name == 'Kari Nordmann'

    boards = get_global_leaderboards(limit=100)
    assert 'stats-device' in [p.device_id for p in boards.by_wins]


def test_participant_edit_on_graded_coupon_refreshes_winners():
    coupon, q1, q2 = _setup('Endret svar')
    submit_answers(coupon.id, 'edit-p1', {q1.id: 'A', q2.id: 'X'}, player_name='P1')
    submit_answers(coupon.id, 'edit-p2', {q1.id: 'B', q2.id: 'X'}, player_name='P2')
    save_correct_answer(coupon.id, q1.id, 'A')
    assert _flags(coupon.id) == {'edit-p1': True, 'edit-p2': False}

    notifier = ChangeNotifier()
    signalled = []
    notifier.subscribe(signalled.append)
    result = submit_coupon(coupon.id, 'edit-p1', {q1.id: 'B', q2.id: 'X'}, player_name='P1', notifier=notifier)

    assert not result.created
    # both now miss Q1 and tie at zero points
    assert _flags(coupon.id) == {'edit-p1': True, 'edit-p2': True}
    assert get_player_stats('edit-p2').wins == 1
    assert signalled == [coupon.id]


def test_participant_delete_on_graded_coupon_refreshes_winners():
    coupon, q1, q2 = _setup('Slettet svar')
    submit_answers(coupon.id, 'del-p1', {q1.id: 'A', q2.id: 'X'}, player_name='P1')
    submit_answers(coupon.id, 'del-p2', {q1.id: 'B', q2.id: 'X'}, player_name='P2')
    save_correct_answer(coupon.id, q1.id, 'A')
    winner = next(s for s in list_submissions(coupon.id) if s.device_id == 'del-p1')

    assert withdraw_submission(coupon.id, winner.id, 'del-p1') is True

    assert _flags(coupon.id) == {'del-p2': True}
    assert get_player_stats('del-p1').wins == 0


def test_participant_submit_on_ungraded_coupon_sends_no_signal():
    coupon, q1, q2 = _setup('Uten fasit')
    notifier = ChangeNotifier()
    signalled = []
    notifier.subscribe(signalled.append)

    result = submit_coupon(coupon.id, 'open-p1', {q1.id: 'A', q2.id: 'X'}, player_name='P1', notifier=notifier)

    assert result.created
    assert signalled == []
    assert _flags(coupon.id) == {'open-p1': False}
