"""Sallen-Key Designer Backend: FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.routes import filters

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    # Resolve solver config once so a bad SKLP_* override fails at startup
    config = filters.get_config()
    app.state.solver_config = config
    logger.info(
        "Solver config: series=%s caps=[%g, %g] F resistors=[%g, %g] Ω",
        config.series, config.min_capacitance, config.max_capacitance,
        config.min_resistance, config.max_resistance,
    )
    yield


app = FastAPI(
    title="Sallen-Key Designer API",
    description="Preferred-value component solver for unity-gain Sallen-Key low-pass filters",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow frontend origins
_frontend_url = os.getenv("FRONTEND_URL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[_frontend_url] if _frontend_url else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(filters.router, prefix="/api", tags=["Sallen-Key"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "sallen-key-backend"}
