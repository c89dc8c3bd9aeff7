# tripcrew/routes/__init__.py
from fastapi import APIRouter
from tripcrew.routes.trip import trip_routes, trip_member, invitation, checklist
from tripcrew.routes.itineraries import day_routes


api_router = APIRouter()

# Invite redemption first: POST /trips/join must not be shadowed by /trips/{trip_id} routes
api_router.include_router(invitation.router)

# Trip routes
api_router.include_router(trip_routes.router)
api_router.include_router(trip_member.router)
api_router.include_router(checklist.router)

# Itinerary routes
api_router.include_router(day_routes.router)
