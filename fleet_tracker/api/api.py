from fastapi import APIRouter

from fleet_tracker.api.endpoints import auth, health, vehicles

# Create API router
api_router = APIRouter()

# Include endpoint routers with appropriate prefixes and tags
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(vehicles.router, prefix="/vehicle", tags=["vehicle"])
