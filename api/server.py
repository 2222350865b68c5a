"""
EQBAL PLANNER API Server

Stateless HTTP front for the placement engine. A browser UI posts its
current layout and gets back validity, placements and resolved moves.
"""

import logging
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.placement_router import router as placement_router
from api.response_models import HealthResponse
from eqbal.config import API_PORT, CORS_ORIGINS, LOG_LEVEL
from eqbal.observability import configure_logging

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="EQBAL PLANNER API",
    description="Collision detection and placement resolution for balance timelines",
    version=API_VERSION,
)

# CORS - configurable via CORS_ORIGINS env var (comma-separated, default "*")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(placement_router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Liveness check."""
    return {
        "status": "healthy",
        "version": API_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }


# ==== Main ====


def main():
    """Run the server."""
    configure_logging(LOG_LEVEL)
    logger.info(f"Starting EQBAL PLANNER API on port {API_PORT}")
    uvicorn.run(app, host="0.0.0.0", port=API_PORT)


if __name__ == "__main__":
    main()
