"""Trip guard: every refusal looks like a missing trip."""

import pytest

from tripcrew.core.errors import TripNotFound, TripAccessDenied
from tripcrew.models import Trip, EffectiveRole
from tripcrew.services.access.guard import AccessLevel, TripGuard


@pytest.mark.parametrize("principal,level,role", [
    ("alice", AccessLevel.WRITE, EffectiveRole.ADMIN),
    ("bob", AccessLevel.READ, EffectiveRole.VIEWER),
    ("carol", AccessLevel.WRITE, EffectiveRole.ADMIN),
])
async def test_allowed_principals_get_trip_and_role(db, shared_trip, principal, level, role):
    access = await TripGuard(db).require(shared_trip.id, principal, level)

    assert access.trip.id == shared_trip.id
    assert access.role == role
    assert access.can_edit is (role == EffectiveRole.ADMIN)


async def test_viewer_cannot_write(db, shared_trip):
    with pytest.raises(TripAccessDenied) as exc:
        await TripGuard(db).require(shared_trip.id, "bob", AccessLevel.WRITE)

    assert isinstance(exc.value, TripNotFound)
    assert exc.value.http_status == 404
    assert exc.value.code == "TRIP_NOT_FOUND"


@pytest.mark.parametrize("principal", ["mallory", None, ""])
async def test_strangers_see_not_found(db, shared_trip, principal):
    with pytest.raises(TripNotFound):
        await TripGuard(db).require(shared_trip.id, principal, AccessLevel.READ)


async def test_missing_trip_is_not_found(db):
    with pytest.raises(TripNotFound):
        await TripGuard(db).require("does-not-exist", "alice", AccessLevel.READ)


async def test_denied_and_missing_responses_are_identical(db, shared_trip):
    guard = TripGuard(db)
    with pytest.raises(TripNotFound) as denied:
        await guard.require(shared_trip.id, "bob", AccessLevel.WRITE)
    with pytest.raises(TripNotFound) as missing:
        await guard.require("does-not-exist", "bob", AccessLevel.WRITE)

    assert denied.value.to_response()["error"]["code"] == missing.value.to_response()["error"]["code"]
    assert denied.value.http_status == missing.value.http_status


async def test_visible_trips_covers_owned_and_shared(db, shared_trip):
    other = Trip(title="Chapada Diamantina", owner_id="bob")
    hidden = Trip(title="Lençóis", owner_id="zoe")
    db.add_all([other, hidden])
    await db.commit()

    guard = TripGuard(db)
    assert {t.id for t in await guard.visible_trips("bob")} == {shared_trip.id, other.id}
    assert {t.id for t in await guard.visible_trips("alice")} == {shared_trip.id}
    assert await guard.visible_trips("mallory") == []
    assert await guard.visible_trips(None) == []
