from __future__ import annotations

import math

from werewolf_core import (
    DEFAULT_PHASE,
    Default,
    Found,
    QueuePhase,
    build_rising_bar_queue,
    resolve_competition_order,
    resolve_competitor_name,
)


def _attempt(
    attempt_id,
    weight,
    *,
    lift="Squat",
    number=1,
    status="Pending",
    order=None,
    name=None,
    registration_id=None,
):
    attempt = {
        "id": attempt_id,
        "registrationId": registration_id or f"reg-{attempt_id}",
        "liftType": lift,
        "attemptNumber": number,
        "weight": weight,
        "status": status,
    }
    if order is not None:
        attempt["competitionOrder"] = order
    if name is not None:
        attempt["competitorName"] = name
    return attempt


def _ids(result):
    return [attempt["id"] for attempt in result.attempts]


def test_lightest_weight_first_then_lot_number():
    attempts = [
        _attempt("a", 150, order=3),
        _attempt("b", 150, order=1),
        _attempt("c", 140, order=5),
    ]
    out = build_rising_bar_queue(attempts)
    assert out.phase == QueuePhase(lift_type="Squat", attempt_number=1)
    assert _ids(out) == ["c", "b", "a"]


def test_no_pending_attempts_gives_default_phase_and_empty_queue():
    assert build_rising_bar_queue([]).phase == DEFAULT_PHASE
    done = [_attempt("a", 100, status="Successful"), _attempt("b", 110, status="Failed")]
    out = build_rising_bar_queue(done)
    assert out.phase == DEFAULT_PHASE
    assert out.attempts == ()


def test_current_attempt_always_sets_phase():
    attempts = [
        _attempt("s1", 100),
        _attempt("b2", 80, lift="Bench", number=2),
        _attempt("b1", 70, lift="Bench", number=1),
    ]
    current = {"id": "x", "liftType": "Bench", "attemptNumber": 2, "competitorName": "X"}
    out = build_rising_bar_queue(attempts, current_attempt=current)
    assert out.phase == QueuePhase(lift_type="Bench", attempt_number=2)
    assert _ids(out) == ["b2"]


def test_current_attempt_wins_even_with_no_candidates():
    current = {"liftType": "Deadlift", "attemptNumber": 3}
    out = build_rising_bar_queue([], current_attempt=current)
    assert out.phase == QueuePhase(lift_type="Deadlift", attempt_number=3)
    assert out.attempts == ()


def test_earliest_phase_by_lift_then_attempt_number():
    attempts = [
        _attempt("d1", 200, lift="Deadlift", number=1),
        _attempt("b3", 120, lift="Bench", number=3),
        _attempt("b2", 115, lift="Bench", number=2),
        _attempt("b2x", 110, lift="Bench", number=2),
        _attempt("s3", 180, lift="Squat", number=3, status="Successful"),
    ]
    out = build_rising_bar_queue(attempts)
    assert out.phase == QueuePhase(lift_type="Bench", attempt_number=2)
    assert _ids(out) == ["b2x", "b2"]


def test_unweighted_attempts_only_decide_phase_when_nothing_is_weighted():
    weighted_later = [
        _attempt("s1", None),
        _attempt("s1b", 0),
        _attempt("b1", 90, lift="Bench"),
    ]
    out = build_rising_bar_queue(weighted_later)
    assert out.phase == QueuePhase(lift_type="Bench", attempt_number=1)
    assert _ids(out) == ["b1"]

    nothing_weighted = [_attempt("b2", None, lift="Bench", number=2), _attempt("d1", None, lift="Deadlift")]
    out = build_rising_bar_queue(nothing_weighted)
    assert out.phase == QueuePhase(lift_type="Bench", attempt_number=2)
    assert out.attempts == ()


def test_registration_supplies_missing_lot_number_and_unknown_sorts_last():
    attempts = [
        _attempt("a", 100, registration_id="r1"),
        _attempt("b", 100, registration_id="missing"),
        _attempt("c", 100, registration_id="r2"),
    ]
    registrations = [
        {"id": "r1", "firstName": "Ana", "lastName": "Pop", "competitionOrder": 7},
        {"id": "r2", "firstName": "Dan", "lastName": "Ion", "competitionOrder": 2},
    ]
    out = build_rising_bar_queue(attempts, registrations=registrations)
    assert _ids(out) == ["c", "a", "b"]


def test_attempt_lot_number_beats_registration_lot_number():
    attempts = [
        _attempt("a", 100, order=9, registration_id="r1"),
        _attempt("b", 100, registration_id="r2"),
    ]
    registrations = [
        {"id": "r1", "competitionOrder": 1},
        {"id": "r2", "competitionOrder": 5},
    ]
    out = build_rising_bar_queue(attempts, registrations=registrations)
    assert _ids(out) == ["b", "a"]


def test_name_breaks_remaining_ties_case_and_accent_insensitive():
    attempts = [
        _attempt("z", 100, name="zoe Ward"),
        _attempt("e", 100, name="Émile Roux"),
        _attempt("b", 100, name="BOB Stone"),
        _attempt("u", 100),
    ]
    out = build_rising_bar_queue(attempts)
    # The attempt without a name falls back to "Unknown competitor".
    assert _ids(out) == ["b", "e", "u", "z"]


def test_stroke_letters_sort_with_their_base_letter():
    attempts = [
        _attempt("p", 100, name="Peter Hansen"),
        _attempt("o", 100, name="Øyvind Lie"),
        _attempt("l", 100, name="Łukasz Nowak"),
        _attempt("m", 100, name="Maria Berg"),
    ]
    out = build_rising_bar_queue(attempts)
    assert _ids(out) == ["l", "m", "o", "p"]


def test_weights_within_epsilon_compare_equal():
    attempts = [
        _attempt("a", 100.0000001, order=1),
        _attempt("b", 100.0, order=2),
        _attempt("c", 100.5, order=0),
    ]
    out = build_rising_bar_queue(attempts)
    assert _ids(out) == ["a", "b", "c"]


def test_queue_is_sorted_by_weight_order_and_name():
    attempts = [
        _attempt(str(i), 100 + (i % 3) * 2.5, order=(i * 7) % 5, name=f"L{i}")
        for i in range(20)
    ]
    out = build_rising_bar_queue(attempts, limit=None)
    keys = [(a["weight"], a["competitionOrder"], a["competitorName"].lower()) for a in out.attempts]
    assert keys == sorted(keys)


def test_limit_bounds_the_queue():
    attempts = [_attempt(str(i), 100 + i) for i in range(20)]
    assert len(build_rising_bar_queue(attempts).attempts) == 12
    assert _ids(build_rising_bar_queue(attempts, limit=3)) == ["0", "1", "2"]
    assert build_rising_bar_queue(attempts, limit=0).attempts == ()
    assert build_rising_bar_queue(attempts, limit=-2).attempts == ()
    assert len(build_rising_bar_queue(attempts, limit=None).attempts) == 20


def test_queue_is_deterministic_and_leaves_input_untouched():
    attempts = [_attempt("a", 120, order=2), _attempt("b", 110, order=1)]
    before = [dict(a) for a in attempts]
    first = build_rising_bar_queue(attempts)
    second = build_rising_bar_queue(attempts)
    assert first == second
    assert attempts == before


def test_resolve_competition_order_reports_source():
    registrations = {"r1": {"id": "r1", "competitionOrder": 4}}
    assert resolve_competition_order({"competitionOrder": 2}, registrations) == Found(
        value=2, source="attempt"
    )
    assert resolve_competition_order({"registrationId": "r1"}, registrations) == Found(
        value=4, source="registration"
    )
    assert resolve_competition_order({"registrationId": "r1", "competitionOrder": True}, registrations) == Found(
        value=4, source="registration"
    )
    missing = resolve_competition_order({"registrationId": "nope"}, registrations)
    assert isinstance(missing, Default)
    assert missing.value == math.inf


def test_resolve_competitor_name_uses_first_last_from_registration():
    registrations = {"r1": {"id": "r1", "firstName": "Ana", "lastName": "Pop"}}
    assert resolve_competitor_name({"registrationId": "r1"}, registrations) == Found(
        value="Ana Pop", source="registration"
    )
    assert resolve_competitor_name({"competitorName": "Pop Ana", "registrationId": "r1"}, registrations).source == "attempt"
    assert resolve_competitor_name({"registrationId": "r9"}, registrations) == Default(value="Unknown competitor")
