import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleet_tracker.api.api import api_router
from fleet_tracker.api.deps import get_telemetry_service
from fleet_tracker.core.config import settings
from fleet_tracker.core.middleware import add_middleware
from fleet_tracker.db.init_db import init_db
from fleet_tracker.services.simulator import TelemetrySimulator

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Fleet Tracker API for vehicle telemetry ingestion, status and trips",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

# Set CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Authorization", "Content-Type"],
)
add_middleware(app)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

simulator: Optional[TelemetrySimulator] = None

@app.get("/")
async def root():
    """Root endpoint with basic service information."""
    return {
        "message": "Welcome to Fleet Tracker API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }

@app.on_event("startup")
def startup_event():
    """Create tables and start the telemetry simulator."""
    global simulator
    logger.info("Starting fleet tracker service...")
    init_db()

    if settings.SIMULATOR_ENABLED:
        simulator = TelemetrySimulator(get_telemetry_service())
        simulator.start()
    else:
        logger.info("Telemetry simulator disabled")

@app.on_event("shutdown")
def shutdown_event():
    """Stop the telemetry simulator and wait for its loop to exit."""
    if simulator is None:
        return
    simulator.stop()
    if not simulator.join(timeout=simulator.interval * 2):
        logger.warning("Telemetry simulator did not stop in time")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fleet_tracker.main:app", host="0.0.0.0", port=8080)
