from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..time_utils import to_utc_z

ADJUSTMENT_TYPES = ("restock", "shrinkage", "correction")


def _as_float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


class Product(db.Model):
    """
    Product master data and the single mutable stock counter.

    STOCK INVARIANT:
    stock_quantity is written only by the sale recorder (relative decrement)
    and the inventory adjuster (absolute set plus an InventoryAdjustment row).
    Catalog fields (name, price, barcode, ...) are maintained outside this
    backend.

    version_id is bumped on every stock write so that two writers racing on
    the same row cannot both commit a read-modify-write.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_active_stock", "is_active", "stock_quantity"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    barcode = db.Column(db.String(50), nullable=False, unique=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)

    price = db.Column(db.Numeric(10, 2), nullable=False)
    cost = db.Column(db.Numeric(10, 2), nullable=True)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    min_stock_level = db.Column(db.Integer, nullable=False, default=0)

    tax_rate = db.Column(db.Numeric(5, 4), nullable=False, default=Decimal("0.08"))

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} barcode={self.barcode!r} stock={self.stock_quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "barcode": self.barcode,
            "name": self.name,
            "description": self.description,
            "price": _as_float(self.price),
            "cost": _as_float(self.cost),
            "stock_quantity": self.stock_quantity,
            "min_stock_level": self.min_stock_level,
            "tax_rate": _as_float(self.tax_rate),
            "is_active": self.is_active,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryAdjustment(db.Model):
    """
    Append-only audit row for a manual stock change.

    Invariant: new_quantity == old_quantity + quantity_change.
    Sales do not write rows here; they decrement Product.stock_quantity
    directly.
    """
    __tablename__ = "inventory_adjustments"
    __table_args__ = (
        db.CheckConstraint(
            "adjustment_type IN ('restock', 'shrinkage', 'correction')",
            name="ck_inventory_adjustments_type",
        ),
        db.Index("ix_inventory_adjustments_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    adjustment_type = db.Column(db.String(20), nullable=False)

    quantity_change = db.Column(db.Integer, nullable=False)
    old_quantity = db.Column(db.Integer, nullable=False)
    new_quantity = db.Column(db.Integer, nullable=False)

    reason = db.Column(db.Text, nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", backref=db.backref("adjustments", lazy=True))
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "adjustment_type": self.adjustment_type,
            "quantity_change": self.quantity_change,
            "old_quantity": self.old_quantity,
            "new_quantity": self.new_quantity,
            "reason": self.reason,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
        }
