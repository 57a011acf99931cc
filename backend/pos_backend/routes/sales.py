# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/pos_backend/routes/sales.py
"""Sale recording route"""

from flask import Blueprint, request, jsonify, current_app

from ..services import sales_service
from ..services.errors import PosError
from ..time_utils import utcnow, to_utc_z


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
def create_sale_route():
    """
    Record a completed sale: header, line items and stock decrements.

    Body: user_id, payment_method ('cash' | 'card'), items[{product_id,
    quantity, unit_price, tax_rate?}], cash_received?, change_given?,
    payment_id?
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        receipt = sales_service.record_sale(
            user_id=data.get("user_id"),
            payment_method=data.get("payment_method"),
            items=data.get("items"),
            cash_received=data.get("cash_received"),
            change_given=data.get("change_given"),
            payment_id=data.get("payment_id"),
        )
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Sale created successfully",
        "sale": receipt.to_dict(),
        "timestamp": to_utc_z(utcnow()),
    }), 201
