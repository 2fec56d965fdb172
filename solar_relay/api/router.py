from fastapi import APIRouter

from solar_relay.api.routes import auth, relay, telemetry

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(telemetry.router, tags=["telemetry"])
api_router.include_router(relay.router, tags=["relay"])
