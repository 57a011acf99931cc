# backend/pos_backend/routes/inventory.py
"""
Inventory adjustment route.

Adjustments are restock, shrinkage or correction deltas against a single
product. The response carries both the old and the new stock level.
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import inventory_service
from ..services.errors import PosError
from ..time_utils import utcnow, to_utc_z


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/adjust")
def adjust_inventory_route():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        adjustment = inventory_service.adjust_inventory(
            product_id=payload.get("product_id"),
            adjustment_type=payload.get("adjustment_type"),
            quantity_change=payload.get("quantity_change"),
            user_id=payload.get("user_id"),
            reason=payload.get("reason"),
        )
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to adjust inventory")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Inventory adjusted successfully",
        "adjustment": adjustment.to_dict(),
        "timestamp": to_utc_z(utcnow()),
    })
