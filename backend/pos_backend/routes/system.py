# backend/pos_backend/routes/system.py
"""
Liveness and database connectivity checks.
"""

import time
from flask import Blueprint, current_app, jsonify

from ..extensions import db
from ..models import Product
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__, url_prefix="/api/test")


@system_bp.get("")
def ping_route():
    return jsonify({
        "message": "POS API is running!",
        "timestamp": to_utc_z(utcnow()),
        "database": "Connected",
    })


@system_bp.get("/database")
def database_health_route():
    """
    Check database connectivity with a product count.
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
    except Exception:
        current_app.logger.exception("Database health check failed")
        return jsonify({"error": "Database connection failed"}), 500

    elapsed_ms = (time.time() - start_time) * 1000
    return jsonify({
        "message": "Database connection successful!",
        "productCount": product_count,
        "latency_ms": round(elapsed_ms, 2),
        "timestamp": to_utc_z(utcnow()),
    })
