from .trips.trip_model import Trip
from .trips.trip_member import TripMember, TripRole, EffectiveRole
from .trips.trip_invite import TripInviteCode, InviteUsage, InviteState
from .trips.checklist_models import ChecklistItem
from .itinerary.day_model import TripDay
