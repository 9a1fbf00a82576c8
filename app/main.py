# app/main.py
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI

# ---------------------------
# Env loading (root .env first, then app/.env as fallback)
# ---------------------------
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent / ".env", override=False)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# --- DB engine (must be imported BEFORE create_all) ---
from app.db.session import engine  # noqa: E402

# ---------------------------
# MODELS (registers every table on Base.metadata)
# ---------------------------
from app.models import Base  # noqa: E402

# ---------------------------
# ROUTERS
# ---------------------------
from app.api import health  # noqa: E402
from app.api.v1 import deadlines, semaphore  # noqa: E402
from app.core.errors import register_exception_handlers  # noqa: E402
from app.middleware.request_logging import RequestLoggingMiddleware  # noqa: E402

# ---------------------------
# CREATE TABLES (dev-only; guard with env)
# ---------------------------
ENABLE_CREATE_ALL = os.getenv("ENABLE_CREATE_ALL", "1") == "1"

if ENABLE_CREATE_ALL:
    Base.metadata.create_all(bind=engine)

# ---------------------------
# APP
# ---------------------------
app = FastAPI(
    title="Deadline Semaphore",
    version="1.0.0",
    description="Urgency tiers for recurring deadlines of tracked entities.",
)

app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)

# ---------------------------
# ROUTER MOUNT
# ---------------------------
app.include_router(deadlines.router, prefix="/api/v1", tags=["deadlines"])
app.include_router(semaphore.router, prefix="/api/v1", tags=["settings"])
app.include_router(health.router, prefix="/api", tags=["health"])
