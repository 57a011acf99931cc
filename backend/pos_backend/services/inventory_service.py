# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/pos_backend/services/inventory_service.py
"""
Inventory invariants (authoritative)

Stock model:
- Product.stock_quantity is the stored on-hand count.
- A manual adjustment sets it to old + delta and appends exactly one
  InventoryAdjustment row in the same transaction.
- An adjustment may never leave stock negative; the request is rejected and
  nothing is written.

Audit:
- InventoryAdjustment rows are append-only and carry old_quantity,
  new_quantity and quantity_change, so new_quantity == old_quantity + change.
- Sales decrement stock without an adjustment row (see sales_service).
"""

from __future__ import annotations

from typing import Any

from flask import current_app

from ..extensions import db
from ..models import Product, InventoryAdjustment, ADJUSTMENT_TYPES
from ..validation import is_missing, coerce_int, coerce_choice, clean_text
from .concurrency import atomic, lock_for_update
from .errors import InvalidInput, InvalidOperation, NotFound


REQUIRED_FIELDS_MESSAGE = "Missing required fields: product_id, adjustment_type, quantity_change, user_id"


def _load_product(product_id: int, *, lock: bool = False) -> Product:
    query = db.session.query(Product).filter_by(id=product_id)
    if lock:
        query = lock_for_update(query).populate_existing()
    product = query.first()
    if product is None:
        raise NotFound("Product not found", details={"product_id": product_id})
    return product


def get_stock_quantity(product_id: int) -> int:
    """Current stock for a product; NotFound if it does not exist."""
    return _load_product(product_id).stock_quantity


def adjust_inventory(
    *,
    product_id: Any,
    adjustment_type: Any,
    quantity_change: Any,
    user_id: Any,
    reason: Any = None,
) -> InventoryAdjustment:
    """
    Apply a signed stock delta to one product and record why.

    The product row is read under lock inside the same transaction that
    writes the new stock value and the audit row, so concurrent adjustments
    on one product serialize instead of overwriting each other.
    """
    if any(is_missing(v) for v in (product_id, adjustment_type, quantity_change, user_id)):
        raise InvalidInput(REQUIRED_FIELDS_MESSAGE)

    adjustment_type = coerce_choice(adjustment_type, "adjustment_type", ADJUSTMENT_TYPES)
    product_id = coerce_int(product_id, "product_id")
    quantity_change = coerce_int(quantity_change, "quantity_change")
    user_id = coerce_int(user_id, "user_id")
    reason = clean_text(reason, "reason")

    with atomic("adjust inventory"):
        product = _load_product(product_id, lock=True)

        old_quantity = product.stock_quantity
        new_quantity = old_quantity + quantity_change

        if new_quantity < 0:
            raise InvalidOperation(
                "Adjustment would result in negative stock",
                details={
                    "current_stock": old_quantity,
                    "attempted_change": quantity_change,
                },
            )

        product.stock_quantity = new_quantity

        adjustment = InventoryAdjustment(
            product_id=product_id,
            adjustment_type=adjustment_type,
            quantity_change=quantity_change,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            reason=reason,
            user_id=user_id,
        )
        db.session.add(adjustment)
        db.session.flush()

    current_app.logger.info(
        "Inventory %s on product %s: %s -> %s (%+d)",
        adjustment_type, product_id, old_quantity, new_quantity, quantity_change,
    )
    return adjustment
