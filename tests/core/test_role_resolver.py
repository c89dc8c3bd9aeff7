"""Role resolution and the pure authorize decision.

Tests:
    - Owner is admin with or without a membership row
    - Membership rows grant exactly their role, only for their own trip
    - Everyone else, and a missing principal, resolves to none
    - authorize: read needs any role, write needs admin
"""

from types import SimpleNamespace

import pytest

from tripcrew.models.trips.trip_member import EffectiveRole, TripRole
from tripcrew.services.access.guard import AccessLevel, authorize
from tripcrew.services.access.role_resolver import resolve_role

TRIP = SimpleNamespace(id="t1", owner_id="alice")
OTHER_TRIP = SimpleNamespace(id="t2", owner_id="zoe")


def member(trip_id, user_id, role):
    return SimpleNamespace(trip_id=trip_id, user_id=user_id, role=role)


MEMBERSHIPS = [
    member("t1", "bob", TripRole.VIEWER),
    member("t1", "carol", TripRole.ADMIN),
    member("t2", "dave", TripRole.ADMIN),
]


def test_owner_is_admin_without_membership_row():
    assert resolve_role("alice", TRIP, []) == EffectiveRole.ADMIN


def test_owner_stays_admin_even_with_a_viewer_row():
    rows = [member("t1", "alice", TripRole.VIEWER)]
    assert resolve_role("alice", TRIP, rows) == EffectiveRole.ADMIN


@pytest.mark.parametrize("principal,expected", [
    ("bob", EffectiveRole.VIEWER),
    ("carol", EffectiveRole.ADMIN),
    ("dave", EffectiveRole.NONE),
    ("erin", EffectiveRole.NONE),
])
def test_membership_rows_decide_for_non_owners(principal, expected):
    assert resolve_role(principal, TRIP, MEMBERSHIPS) == expected


def test_membership_for_another_trip_is_ignored():
    assert resolve_role("bob", OTHER_TRIP, MEMBERSHIPS) == EffectiveRole.NONE


def test_string_roles_are_accepted():
    assert resolve_role("bob", TRIP, [member("t1", "bob", "viewer")]) == EffectiveRole.VIEWER


@pytest.mark.parametrize("principal", [None, ""])
def test_missing_principal_fails_closed(principal):
    assert resolve_role(principal, TRIP, MEMBERSHIPS) == EffectiveRole.NONE


def test_resolution_is_deterministic():
    results = {resolve_role("carol", TRIP, MEMBERSHIPS) for _ in range(50)}
    assert results == {EffectiveRole.ADMIN}


@pytest.mark.parametrize("principal,level,allowed", [
    ("alice", AccessLevel.READ, True),
    ("alice", AccessLevel.WRITE, True),
    ("carol", AccessLevel.WRITE, True),
    ("bob", AccessLevel.READ, True),
    ("bob", AccessLevel.WRITE, False),
    ("erin", AccessLevel.READ, False),
    ("erin", AccessLevel.WRITE, False),
    (None, AccessLevel.READ, False),
])
def test_authorize(principal, level, allowed):
    assert authorize(principal, TRIP, MEMBERSHIPS, level) is allowed


def test_authorize_accepts_level_strings():
    assert authorize("bob", TRIP, MEMBERSHIPS, "read") is True
    assert authorize("bob", TRIP, MEMBERSHIPS, "write") is False
