"""
Tests for trigger_matching and the read-only matching queries.

Tests must prove:
1. Scenarios: 3 couples, 5 singles, 2 couples + 8 singles, 7 singles
2. Coverage, no duplicate membership, size invariant
3. Idempotency guard (second trigger refused, no new circles)
4. Event closes with timestamps; failed runs roll back completely
5. Pool / user circle / opt-in queries
"""

from collections import Counter

import pytest
from sqlmodel import Session, select

from dinner_circles.config import MatchingConfig
from dinner_circles.models.circle import Circle, CircleMember
from dinner_circles.models.event import Event, MatchingStatus
from dinner_circles.models.opt_in import MatchingOptIn
from dinner_circles.services import matching_service
from dinner_circles.services.errors import AlreadyMatched, EventNotFound, InsufficientPool, ProfileNotFound
from dinner_circles.services.matching_service import (
    get_matching_pool,
    get_matching_results,
    get_user_circle,
    is_user_opted_in,
    trigger_matching,
)

CONFIG = MatchingConfig(target_size=6, min_size=4)


def roles_of(circle):
    return [m.role for m in circle.members]


def assert_invariants(session: Session, event_id: int, outcome, config=CONFIG):
    """Coverage, uniqueness and size invariants for a finished run."""
    opted_in = [o.user_id for o in session.exec(select(MatchingOptIn).where(MatchingOptIn.event_id == event_id)).all()]
    members = [m.user_id for c in outcome.circles for m in c.members]

    assert len(members) == len(set(members))
    assert set(members) | set(outcome.unassigned_user_ids) == set(opted_in)
    assert not set(members) & set(outcome.unassigned_user_ids)

    undersized = [c for c in outcome.circles if len(c.members) != config.target_size]
    assert len(undersized) <= 1
    for circle in undersized:
        assert config.min_size <= len(circle.members) < config.target_size

    for circle in outcome.circles:
        counts = Counter(roles_of(circle))
        if circle.format == "hosted":
            assert counts["host"] == 1
            assert counts["participant"] == len(circle.members) - 1
        elif len(circle.members) == 6:
            assert counts == Counter({"starter": 2, "main": 2, "dessert": 2})


# ============================================================================
# Scenarios
# ============================================================================


def test_three_couples_form_one_rotating_circle(session, make_event, add_couple):
    event = make_event()
    couples = [add_couple(event) for _ in range(3)]

    outcome = trigger_matching(session, event.id, CONFIG)

    assert len(outcome.circles) == 1
    circle = outcome.circles[0]
    assert circle.format == "rotating"
    assert circle.member_ids == [u.id for pair in couples for u in pair]
    assert roles_of(circle) == ["starter", "main", "dessert", "starter", "main", "dessert"]
    assert outcome.unassigned_user_ids == []
    assert_invariants(session, event.id, outcome)


def test_five_singles_is_insufficient(session, make_event, add_singles):
    event = make_event()
    add_singles(event, 5)

    with pytest.raises(InsufficientPool):
        trigger_matching(session, event.id, CONFIG)

    assert session.exec(select(Circle)).all() == []
    assert session.get(Event, event.id).matching_status == MatchingStatus.open


def test_two_couples_fall_through_to_hosted(session, make_event, add_couple, add_singles):
    event = make_event()
    couple_users = [u for _ in range(2) for u in add_couple(event)]
    single_users = add_singles(event, 8)

    outcome = trigger_matching(session, event.id, CONFIG)

    assert [c.format for c in outcome.circles] == ["hosted", "hosted"]
    assert [len(c.members) for c in outcome.circles] == [6, 6]
    first_ids = set(outcome.circles[0].member_ids)
    assert {u.id for u in couple_users} <= first_ids
    assert {u.id for u in single_users[:2]} <= first_ids
    assert set(outcome.circles[1].member_ids) == {u.id for u in single_users[2:]}
    assert_invariants(session, event.id, outcome)


def test_seven_singles_leave_one_unassigned(session, make_event, add_singles):
    event = make_event()
    users = add_singles(event, 7)

    outcome = trigger_matching(session, event.id, CONFIG)

    assert len(outcome.circles) == 1
    assert len(outcome.circles[0].members) == 6
    assert outcome.unassigned_user_ids == [users[6].id]
    assert_invariants(session, event.id, outcome)


def test_ten_singles_get_an_overflow_circle(session, make_event, add_singles):
    event = make_event()
    users = add_singles(event, 9)
    chef = add_singles(event, 1, hosting=True, cooking_experience="advanced")[0]

    outcome = trigger_matching(session, event.id, CONFIG)

    assert [len(c.members) for c in outcome.circles] == [6, 4]
    overflow = outcome.circles[1]
    assert overflow.format == "hosted"
    assert overflow.members[0].user_id == chef.id
    assert overflow.members[0].role == "host"
    assert set(overflow.member_ids) == {users[6].id, users[7].id, users[8].id, chef.id}
    assert_invariants(session, event.id, outcome)


def test_mixed_pool_rotating_then_overflow(session, make_event, add_couple, add_singles):
    event = make_event()
    first_three = [add_couple(event) for _ in range(3)]
    last_a, last_b = add_couple(event)
    add_singles(event, 3)

    outcome = trigger_matching(session, event.id, CONFIG)

    assert [c.format for c in outcome.circles] == ["rotating", "hosted"]
    assert outcome.circles[0].member_ids == [u.id for pair in first_three for u in pair]
    overflow = outcome.circles[1]
    assert len(overflow.members) == 5
    # Nobody volunteered; the partnered user with their partner present wins
    assert overflow.members[0].user_id == last_a.id
    assert last_b.id in overflow.member_ids
    assert_invariants(session, event.id, outcome)


def test_rotating_keeps_partners_together(session, make_event, add_couple, add_singles):
    event = make_event()
    for _ in range(6):
        add_couple(event)
    add_singles(event, 2)

    outcome = trigger_matching(session, event.id, CONFIG)

    pool = {e.user_id: e.partner_id for e in get_matching_pool(session, event.id)}
    for circle in outcome.circles:
        if circle.format != "rotating":
            continue
        ids = set(circle.member_ids)
        for user_id in ids:
            assert pool[user_id] in ids
    assert outcome.unassigned_user_ids == [u for u in pool if pool[u] is None]


def test_partner_claimed_by_rotating_batch_is_reported_unassigned(
    session, make_event, make_user, add_opt_in
):
    event = make_event()
    users = [make_user() for _ in range(8)]
    u = {i + 1: user for i, user in enumerate(users)}
    # Couples (1,2), (3,4), (5,7), (6,8) with 7 and 8 opting in last
    add_opt_in(event, u[1], partner=u[2])
    add_opt_in(event, u[2], partner=u[1])
    add_opt_in(event, u[3], partner=u[4])
    add_opt_in(event, u[4], partner=u[3])
    add_opt_in(event, u[5], partner=u[7])
    add_opt_in(event, u[6], partner=u[8])
    add_opt_in(event, u[7], partner=u[5])
    add_opt_in(event, u[8], partner=u[6])

    outcome = trigger_matching(session, event.id, CONFIG)

    assert len(outcome.circles) == 1
    assert outcome.circles[0].member_ids == [u[i].id for i in range(1, 7)]
    assert outcome.unassigned_user_ids == [u[7].id, u[8].id]


# ============================================================================
# State machine
# ============================================================================


def test_trigger_closes_event_with_timestamps(session, make_event, add_singles):
    event = make_event()
    add_singles(event, 6)

    outcome = trigger_matching(session, event.id, CONFIG)

    stored = session.get(Event, event.id)
    assert stored.matching_status == MatchingStatus.closed
    assert stored.matching_triggered_at is not None
    assert stored.matching_completed_at is not None
    assert stored.matching_triggered_at <= stored.matching_completed_at
    assert outcome.completed_at is not None


def test_second_trigger_is_refused(session, make_event, add_singles):
    event = make_event()
    add_singles(event, 12)
    trigger_matching(session, event.id, CONFIG)

    with pytest.raises(AlreadyMatched):
        trigger_matching(session, event.id, CONFIG)

    assert len(session.exec(select(Circle).where(Circle.event_id == event.id)).all()) == 2


def test_unknown_event(session):
    with pytest.raises(EventNotFound):
        trigger_matching(session, 424242, CONFIG)


def test_failed_run_rolls_back(session, make_event, add_singles, monkeypatch):
    event = make_event()
    add_singles(event, 12)
    real_assign = matching_service.assign_circles

    def assign_then_fail(*args, **kwargs):
        real_assign(*args, **kwargs)
        raise RuntimeError("disk full")

    monkeypatch.setattr(matching_service, "assign_circles", assign_then_fail)

    with pytest.raises(RuntimeError):
        trigger_matching(session, event.id, CONFIG)

    assert session.exec(select(Circle)).all() == []
    assert session.exec(select(CircleMember)).all() == []
    assert session.get(Event, event.id).matching_status == MatchingStatus.open

    monkeypatch.undo()
    outcome = trigger_matching(session, event.id, CONFIG)
    assert len(outcome.circles) == 2


def test_events_are_matched_independently(session, make_event, add_singles):
    first = make_event(title="Tuesday")
    second = make_event(title="Thursday")
    add_singles(first, 6)
    add_singles(second, 6)

    trigger_matching(session, first.id, CONFIG)

    assert get_matching_results(session, second.id) == []
    assert len(trigger_matching(session, second.id, CONFIG).circles) == 1


# ============================================================================
# Read-only queries
# ============================================================================


def test_results_empty_before_matching(session, make_event, add_singles):
    event = make_event()
    add_singles(event, 3)

    assert get_matching_results(session, event.id) == []


def test_results_unknown_event_is_empty(session):
    assert get_matching_results(session, 999) == []


def test_results_match_trigger_outcome(session, make_event, add_singles):
    event = make_event()
    add_singles(event, 12, interests=["wine", "jazz"], personality_type="ambivert")

    outcome = trigger_matching(session, event.id, CONFIG)
    results = get_matching_results(session, event.id)

    assert [c.id for c in results] == [c.id for c in outcome.circles]
    assert [c.member_ids for c in results] == [c.member_ids for c in outcome.circles]
    assert all(m.name for c in results for m in c.members)
    # identical interests (30) + same personality (25)
    assert results[0].compatibility == 55.0


def test_user_circle(session, make_event, add_singles):
    event = make_event()
    users = add_singles(event, 7)

    assert get_user_circle(session, event.id, users[0].id) is None

    outcome = trigger_matching(session, event.id, CONFIG)

    circle = get_user_circle(session, event.id, users[0].id)
    assert circle is not None
    assert circle.id == outcome.circles[0].id
    assert get_user_circle(session, event.id, users[6].id) is None


def test_is_user_opted_in(session, make_event, make_user, add_opt_in):
    event = make_event()
    joined = make_user()
    stranger = make_user()
    add_opt_in(event, joined)

    assert is_user_opted_in(session, event.id, joined.id) is True
    assert is_user_opted_in(session, event.id, stranger.id) is False


def test_pool_resolves_partners_and_symmetry(session, make_event, make_user, add_opt_in):
    event = make_event()
    a, b, c, d = (make_user(cooking_experience="advanced") for _ in range(4))
    add_opt_in(event, a, partner=b, hosting=True)
    add_opt_in(event, b, partner=a)
    add_opt_in(event, c, partner=d)  # d never opted in
    e = make_user()
    add_opt_in(event, e)

    pool = get_matching_pool(session, event.id)

    assert [e.user_id for e in pool][:3] == [a.id, b.id, c.id]
    assert pool[0].partner_profile.user_id == b.id
    assert pool[0].partner_link_symmetric is True
    assert pool[0].hosting_available is True
    assert pool[1].partner_link_symmetric is True
    assert pool[2].partner_profile.user_id == d.id
    assert pool[2].partner_link_symmetric is False
    assert pool[3].partner_id is None
    assert pool[3].partner_link_symmetric is None


def test_pool_unknown_event(session):
    with pytest.raises(EventNotFound):
        get_matching_pool(session, 31337)


def test_missing_profile_is_a_data_error(session, make_event, add_singles):
    event = make_event()
    add_singles(event, 6)
    session.add(MatchingOptIn(event_id=event.id, user_id=9999))
    session.commit()

    with pytest.raises(ProfileNotFound) as exc_info:
        trigger_matching(session, event.id, CONFIG)

    assert exc_info.value.user_ids == [9999]
    assert session.exec(select(Circle)).all() == []
