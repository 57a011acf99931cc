# backend/pos_backend/config.py
from __future__ import annotations
import os
from decimal import Decimal


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/pos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///pos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Applied per line item when the cart does not carry its own tax_rate
    DEFAULT_TAX_RATE = Decimal(os.environ.get("POS_DEFAULT_TAX_RATE", "0.08"))

    # Sales decrement stock without a floor unless this is switched on
    ENFORCE_SALE_STOCK_FLOOR = _env_flag("POS_ENFORCE_SALE_STOCK_FLOOR")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
