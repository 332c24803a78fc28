# backend/runway/routes/system.py
"""
Liveness endpoint.

Reports process uptime and whether the database answers a trivial query.
"""

import time
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db

system_bp = Blueprint("system", __name__)

_STARTED_AT = time.monotonic()


def check_database_health() -> dict:
    """
    Check database connectivity.

    Returns dict with status and latency.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/healthz")
def healthz():
    database = check_database_health()
    payload = {
        "status": "ok" if database["status"] == "healthy" else "degraded",
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "database": database,
    }
    return jsonify(payload), 200 if payload["status"] == "ok" else 503
