# backend/brillix/routes/system.py
"""
System health and welcome endpoints.

Provides a liveness check for the API process and a database connectivity
check for deployment debugging.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"

_started_at = time.monotonic()


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial round trip.

    Returns dict with status and latency.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "connected",
            "latency_ms": round(elapsed_ms, 2),
            "dialect": db.engine.dialect.name,
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "disconnected",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/")
def welcome():
    return {
        "success": True,
        "message": "Welcome to Brillix API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/api/health",
            "auth": "/api/auth",
            "business": "/api/business",
        },
    }


@system_bp.get("/api/health")
def health():
    """Process liveness; never touches the database."""
    return {
        "success": True,
        "message": "Brillix API is running",
        "timestamp": to_utc_z(utcnow()),
        "uptime": round(time.monotonic() - _started_at, 3),
        "environment": current_app.config.get("ENV"),
    }


@system_bp.get("/api/health/db")
def database_health():
    """
    Database connectivity check.

    Returns:
    - 200: SELECT 1 succeeded
    - 503: database unreachable
    """
    database = check_database_health()
    timestamp = to_utc_z(utcnow())

    if database["status"] != "connected":
        return {
            "success": False,
            "message": "Database connection is not healthy",
            "database": database,
            "timestamp": timestamp,
        }, 503

    return {
        "success": True,
        "message": "Database connection is healthy",
        "database": database,
        "timestamp": timestamp,
    }
