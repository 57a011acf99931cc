"""
Sale recorder: converts a cart into one sale header, its line items and the
matching stock decrements, committed as a single unit.

Totals are computed per line item: every item carries its own tax rate and
falls back to DEFAULT_TAX_RATE independently when it has none.

Stock floor: by default a sale decrements stock without checking it, so an
oversold product goes negative. Manual adjustments always refuse negative
stock. Set ENFORCE_SALE_STOCK_FLOOR to apply the same floor to sales.
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import asdict, dataclass
from decimal import Decimal, ROUND_CEILING
from typing import Any, Iterable

from flask import current_app
from sqlalchemy import literal, select, update

from ..extensions import db
from ..models import Sale, SaleItem, Product, PAYMENT_METHODS
from ..validation import is_missing, coerce_int, coerce_decimal, coerce_choice, clean_text
from .concurrency import atomic
from .errors import InvalidInput, InvalidOperation, NotFound


SALE_NUMBER_PREFIX = "SALE"
_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 5

ITEM_FIELDS_MESSAGE = "Each item must have product_id, quantity, and unit_price"


@dataclass(frozen=True)
class CartItem:
    product_id: int
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal | None = None

    @property
    def total_price(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def stock_units(self) -> int:
        """Whole units taken from stock; a partial unit consumes a full one."""
        return int(self.quantity.to_integral_value(rounding=ROUND_CEILING))


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class SaleReceipt:
    sale_id: int
    sale_number: str
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    item_count: int

    def to_dict(self) -> dict:
        return {
            "id": self.sale_id,
            "sale_number": self.sale_number,
            "subtotal": float(self.subtotal),
            "tax_amount": float(self.tax_amount),
            "total_amount": float(self.total_amount),
            "items_count": self.item_count,
        }


def generate_sale_number() -> str:
    """
    Time-based sale number with a random base36 suffix.

    Unique with overwhelming probability only; the sales.sale_number unique
    index is the actual guard.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{SALE_NUMBER_PREFIX}-{millis}-{suffix}"


def _parse_item(raw: Any, index: int) -> CartItem:
    if isinstance(raw, CartItem):
        raw = asdict(raw)
    if not isinstance(raw, dict):
        raise InvalidInput(ITEM_FIELDS_MESSAGE, details={"index": index})

    if any(is_missing(raw.get(key)) for key in ("product_id", "quantity", "unit_price")):
        raise InvalidInput(ITEM_FIELDS_MESSAGE, details={"index": index})

    product_id = coerce_int(raw["product_id"], "product_id")
    quantity = coerce_decimal(raw["quantity"], "quantity")
    unit_price = coerce_decimal(raw["unit_price"], "unit_price")

    if quantity <= 0:
        raise InvalidInput("quantity must be > 0", details={"index": index})
    if unit_price <= 0:
        raise InvalidInput("unit_price must be > 0", details={"index": index})

    tax_rate = raw.get("tax_rate")
    if tax_rate is not None:
        tax_rate = coerce_decimal(tax_rate, "tax_rate")
        if tax_rate < 0:
            raise InvalidInput("tax_rate must be >= 0", details={"index": index})

    return CartItem(product_id=product_id, quantity=quantity, unit_price=unit_price, tax_rate=tax_rate)


def parse_cart_items(raw_items: Iterable[Any]) -> list[CartItem]:
    """Validate every line item up front; the first bad item rejects the whole cart."""
    return [_parse_item(raw, index) for index, raw in enumerate(raw_items)]


def calculate_totals(items: Iterable[CartItem], default_tax_rate: Decimal) -> SaleTotals:
    subtotal = Decimal("0")
    tax_amount = Decimal("0")

    for item in items:
        item_total = item.total_price
        subtotal += item_total

        rate = item.tax_rate if item.tax_rate is not None else default_tax_rate
        tax_amount += item_total * rate

    return SaleTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total_amount=subtotal + tax_amount,
    )


def _optional_amount(value: Any, field: str) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    amount = coerce_decimal(value, field)
    if amount < 0:
        raise InvalidInput(f"{field} must be >= 0")
    return amount


def _decrement_stock(item: CartItem, *, enforce_floor: bool) -> None:
    """
    Relative decrement in one UPDATE so concurrent sales on the same product
    never lose an update.
    """
    quantity = literal(item.stock_units, db.Integer)
    stmt = (
        update(Product)
        .where(Product.id == item.product_id)
        .values(
            stock_quantity=Product.stock_quantity - quantity,
            version_id=Product.version_id + 1,
        )
        .execution_options(synchronize_session=False)
    )
    if enforce_floor:
        stmt = stmt.where(Product.stock_quantity >= quantity)

    result = db.session.execute(stmt)
    if result.rowcount == 1:
        return

    current = db.session.execute(
        select(Product.stock_quantity).where(Product.id == item.product_id)
    ).scalar_one_or_none()
    if current is None:
        raise NotFound("Product not found", details={"product_id": item.product_id})

    raise InvalidOperation(
        "Sale would result in negative stock",
        details={
            "product_id": item.product_id,
            "current_stock": current,
            "requested_quantity": float(item.quantity),
        },
    )


def record_sale(
    *,
    user_id: Any,
    payment_method: Any,
    items: Any,
    cash_received: Any = None,
    change_given: Any = None,
    payment_id: Any = None,
) -> SaleReceipt:
    """
    Record a completed sale.

    All input is validated before storage is touched. Inside one transaction
    the sale header is inserted, then for every item in input order its line
    row is inserted and its product's stock is decremented. Any failure rolls
    back the whole sale.
    """
    if is_missing(user_id) or not isinstance(items, (list, tuple)) or not items:
        raise InvalidInput("Missing required fields: user_id, items (array)")

    user_id = coerce_int(user_id, "user_id")
    payment_method = coerce_choice(payment_method, "payment_method", PAYMENT_METHODS)
    cart = parse_cart_items(items)
    cash_received = _optional_amount(cash_received, "cash_received")
    change_given = _optional_amount(change_given, "change_given")
    payment_id = clean_text(payment_id, "payment_id", max_length=100)

    default_tax_rate = coerce_decimal(current_app.config["DEFAULT_TAX_RATE"], "DEFAULT_TAX_RATE")
    enforce_floor = bool(current_app.config.get("ENFORCE_SALE_STOCK_FLOOR", False))

    totals = calculate_totals(cart, default_tax_rate)
    sale_number = generate_sale_number()

    with atomic("record sale"):
        sale = Sale(
            sale_number=sale_number,
            user_id=user_id,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            payment_method=payment_method,
            cash_received=cash_received,
            change_given=change_given,
            payment_id=payment_id,
        )
        db.session.add(sale)
        db.session.flush()

        for item in cart:
            db.session.add(SaleItem(
                sale_id=sale.id,
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
            ))
            db.session.flush()
            _decrement_stock(item, enforce_floor=enforce_floor)

        sale_id = sale.id

    current_app.logger.info(
        "Sale %s recorded: %d item(s), total %s, payment %s",
        sale_number, len(cart), totals.total_amount, payment_method,
    )

    return SaleReceipt(
        sale_id=sale_id,
        sale_number=sale_number,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        total_amount=totals.total_amount,
        item_count=len(cart),
    )
