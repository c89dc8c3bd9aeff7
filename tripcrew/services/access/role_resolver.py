from typing import Iterable, Optional

from tripcrew.models.trips.trip_member import EffectiveRole, TripRole


def resolve_role(principal_id: Optional[str], trip, memberships: Iterable) -> EffectiveRole:
    """Effective role of ``principal_id`` on ``trip``.

    ``trip`` needs ``id`` and ``owner_id``; ``memberships`` is any iterable of
    rows exposing ``trip_id``, ``user_id`` and ``role``. Rows for other trips
    are ignored. Ownership always wins over a membership row, and a missing
    principal resolves to ``NONE``.
    """
    if not principal_id:
        return EffectiveRole.NONE

    principal_id = str(principal_id)
    if trip.owner_id == principal_id:
        return EffectiveRole.ADMIN

    for member in memberships:
        if member.trip_id == trip.id and member.user_id == principal_id:
            return EffectiveRole(TripRole(member.role).value)

    return EffectiveRole.NONE
