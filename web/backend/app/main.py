"""FastAPI application for the reportguard moderation service.

Provides REST API endpoints wrapping the reportguard package for:
- Pre-check and classifier moderation of incident report submissions
- The append-only moderation log (listing and export)
- False-report risk scoring and summaries
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the reportguard package is importable by adding the project root to sys.path.
_project_root = str(Path(__file__).resolve().parents[3])
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reportguard import __version__
from web.backend.app.routers import moderation, risk

app = FastAPI(
    title="reportguard API",
    description=(
        "REST API for incident report moderation. "
        "Provides endpoints for content pre-checks, classifier moderation, "
        "the moderation log, and false-report risk scoring."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(moderation.router)
app.include_router(risk.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "reportguard API",
        "version": __version__,
        "description": "Incident report moderation REST API",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
