from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..time_utils import to_utc_z

PAYMENT_METHODS = ("cash", "card")


def _as_float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


class Sale(db.Model):
    """
    Sale header: totals and payment metadata for one completed cart.

    subtotal, tax_amount and total_amount are derived from the line items at
    creation time (total_amount == subtotal + tax_amount). Sales are immutable
    once committed; there is no update or delete path.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("payment_method IN ('cash', 'card')", name="ck_sales_payment_method"),
        db.Index("ix_sales_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # e.g. "SALE-1760000000000-k3x9q"
    sale_number = db.Column(db.String(50), nullable=False, unique=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Money is kept to 4 places so fractional per-item tax survives storage
    subtotal = db.Column(db.Numeric(12, 4), nullable=False)
    tax_amount = db.Column(db.Numeric(12, 4), nullable=False)
    total_amount = db.Column(db.Numeric(12, 4), nullable=False)

    payment_method = db.Column(db.String(20), nullable=False)
    payment_id = db.Column(db.String(100), nullable=True)
    cash_received = db.Column(db.Numeric(12, 4), nullable=True)
    change_given = db.Column(db.Numeric(12, 4), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="completed")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User")

    def __repr__(self) -> str:
        return f"<Sale id={self.id} sale_number={self.sale_number!r} total={self.total_amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_number": self.sale_number,
            "user_id": self.user_id,
            "subtotal": _as_float(self.subtotal),
            "tax_amount": _as_float(self.tax_amount),
            "total_amount": _as_float(self.total_amount),
            "payment_method": self.payment_method,
            "payment_id": self.payment_id,
            "cash_received": _as_float(self.cash_received),
            "change_given": _as_float(self.change_given),
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }


class SaleItem(db.Model):
    """Line item owned by exactly one sale; created together with it."""
    __tablename__ = "sale_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Numeric(12, 3), nullable=False)
    unit_price = db.Column(db.Numeric(12, 4), nullable=False)
    total_price = db.Column(db.Numeric(12, 4), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    sale = db.relationship("Sale", backref=db.backref("items", lazy=True, order_by="SaleItem.id"))
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "quantity": _as_float(self.quantity),
            "unit_price": _as_float(self.unit_price),
            "total_price": _as_float(self.total_price),
            "created_at": to_utc_z(self.created_at),
        }
