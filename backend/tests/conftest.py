"""
Pytest fixtures for the POS backend tests.

Provides an in-memory database, a test client, a per-test clean slate and
the demo operator/product rows the sale and adjustment tests work against.
"""

from decimal import Decimal

import pytest
from pos_backend import create_app
from pos_backend.extensions import db
from pos_backend.models import User, Product


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DEFAULT_TAX_RATE': Decimal("0.08"),
        'ENFORCE_SALE_STOCK_FLOOR': False,
        'LOG_LEVEL': 'DEBUG',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def file_app(tmp_path):
    """Application on a throwaway SQLite file, for tests that need several connections."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'pos.sqlite3'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30}},
        'DEFAULT_TAX_RATE': Decimal("0.08"),
        'ENFORCE_SALE_STOCK_FLOOR': False,
        'LOG_LEVEL': 'DEBUG',
    })

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def cashier(db_session):
    """Register operator recorded on sales and adjustments."""
    user = User(username="cashier1", email="cashier1@pos.local", role="cashier")
    db_session.add(user)
    db_session.commit()
    return user


def _make_product(db_session, *, barcode, name, price, stock, tax_rate="0.08", min_stock=0):
    product = Product(
        barcode=barcode,
        name=name,
        price=Decimal(price),
        cost=None,
        stock_quantity=stock,
        min_stock_level=min_stock,
        tax_rate=Decimal(tax_rate),
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def cola(db_session):
    """Beverage at 1.50, 8% tax, 100 in stock."""
    return _make_product(
        db_session, barcode="049000000443", name="Coca-Cola 12oz Can",
        price="1.50", stock=100, min_stock=20,
    )


@pytest.fixture(scope='function')
def pepsi(db_session):
    """Beverage at 1.50, 8% tax, 80 in stock."""
    return _make_product(
        db_session, barcode="049000000450", name="Pepsi 12oz Can",
        price="1.50", stock=80, min_stock=20,
    )


@pytest.fixture(scope='function')
def cigarettes(db_session):
    """Tobacco at 8.50, 25% tax, 50 in stock."""
    return _make_product(
        db_session, barcode="012345678901", name="Marlboro Red Pack",
        price="8.50", stock=50, tax_rate="0.25", min_stock=10,
    )


@pytest.fixture(scope='function')
def stock_of(db_session):
    """Read stock straight from the database, bypassing the identity map."""
    def _read(product_id: int) -> int:
        return db_session.execute(
            db.select(Product.stock_quantity).where(Product.id == product_id)
        ).scalar_one()
    return _read
