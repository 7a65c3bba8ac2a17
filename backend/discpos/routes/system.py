# backend/discpos/routes/system.py
"""
System health endpoint.

Public, no authentication. Reports whether the store answers a trivial
query so load balancers and uptime checks can act on it.
"""

import time
from flask import Blueprint, current_app

from ..services import system_service
from ..services.system_service import InfrastructureError
from discpos.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 500: database unreachable
    """
    start_time = time.time()

    try:
        database = system_service.check_database()
    except InfrastructureError as e:
        current_app.logger.error("Database health check failed: %s", e)
        return {
            "status": "ERROR",
            "database": "Disconnected",
            "error": str(e),
            "timestamp": to_utc_z(utcnow()),
        }, 500

    total_elapsed_ms = (time.time() - start_time) * 1000

    return {
        "status": "OK",
        "database": "Connected",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {"database": database},
    }, 200
