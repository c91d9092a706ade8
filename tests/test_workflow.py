import itertools

from bookings.workflow import BOOKING_STATUSES, can_transition


def test_open_table_allows_any_transition():
    for current, target in itertools.product(BOOKING_STATUSES, repeat=2):
        assert can_transition(current, target, strict=False)


def test_strict_table_makes_cancelled_and_completed_terminal():
    assert can_transition("accepted", "cancelled", strict=True)
    assert can_transition("accepted", "completed", strict=True)
    assert not can_transition("cancelled", "accepted", strict=True)
    assert not can_transition("completed", "cancelled", strict=True)
    assert can_transition("completed", "completed", strict=True)


def test_unknown_target_is_never_allowed():
    assert not can_transition("accepted", "pending", strict=False)
    assert not can_transition("accepted", "pending", strict=True)


def test_legacy_status_can_move_to_a_known_one():
    assert can_transition("pending", "accepted", strict=True)


def test_default_follows_configuration(monkeypatch):
    monkeypatch.setattr("config.STRICT_BOOKING_TRANSITIONS", True)
    assert not can_transition("cancelled", "accepted")
    monkeypatch.setattr("config.STRICT_BOOKING_TRANSITIONS", False)
    assert can_transition("cancelled", "accepted")
