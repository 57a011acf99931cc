# Overview: Pytest coverage for the atomic() transaction scope.

import threading
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from pos_backend.extensions import db
from pos_backend.models import InventoryAdjustment, Product, Sale, User
from pos_backend.services.inventory_service import adjust_inventory, get_stock_quantity
from pos_backend.services.sales_service import record_sale
from pos_backend.services.concurrency import atomic
from pos_backend.services.errors import InvalidOperation, StorageFailure


class TestAtomic:

    def test_commits_on_normal_exit(self, db_session):
        with atomic("create user"):
            db.session.add(User(username="alice"))

        db_session.rollback()
        assert db_session.query(User).filter_by(username="alice").count() == 1

    def test_core_error_rolls_back_and_propagates(self, db_session):
        with pytest.raises(InvalidOperation):
            with atomic("create user"):
                db.session.add(User(username="bob"))
                db.session.flush()
                raise InvalidOperation("business rule broken")

        assert db_session.query(User).count() == 0

    def test_integrity_error_becomes_storage_failure(self, db_session):
        db_session.add(User(username="carol"))
        db_session.commit()

        with pytest.raises(StorageFailure) as excinfo:
            with atomic("create user"):
                db.session.add(User(username="dave"))
                db.session.add(User(username="carol"))

        assert str(excinfo.value) == "Failed to create user"
        assert excinfo.value.details == {"reason": "IntegrityError"}
        assert isinstance(excinfo.value.__cause__, IntegrityError)
        assert {u.username for u in db_session.query(User).all()} == {"carol"}

    def test_unexpected_error_rolls_back_and_propagates(self, db_session):
        with pytest.raises(RuntimeError):
            with atomic("create user"):
                db.session.add(User(username="erin"))
                db.session.flush()
                raise RuntimeError("boom")

        assert db_session.query(User).count() == 0

    def test_session_usable_after_rollback(self, db_session):
        with pytest.raises(InvalidOperation):
            with atomic("create user"):
                raise InvalidOperation("nope")

        with atomic("create user"):
            db.session.add(User(username="frank"))

        assert db_session.query(User).count() == 1


class TestConcurrentWriters:
    """Several connections writing the same product row through a SQLite file."""

    THREADS = 6
    OPS_PER_THREAD = 10

    def _seed(self):
        user = User(username="cashier1")
        product = Product(barcode="049000000443", name="Coca-Cola 12oz Can", price=Decimal("1.50"), stock_quantity=1000)
        db.session.add_all([user, product])
        db.session.commit()
        return user.id, product.id

    def test_mixed_sales_and_adjustments_lose_no_update(self, file_app):
        with file_app.app_context():
            db.create_all()
            user_id, product_id = self._seed()

        errors = []
        lock = threading.Lock()

        def worker(n):
            with file_app.app_context():
                try:
                    for i in range(self.OPS_PER_THREAD):
                        if (n + i) % 2:
                            adjust_inventory(
                                product_id=product_id,
                                adjustment_type="restock",
                                quantity_change=1,
                                user_id=user_id,
                            )
                        else:
                            record_sale(
                                user_id=user_id,
                                payment_method="cash",
                                items=[{"product_id": product_id, "quantity": 1, "unit_price": "1.50"}],
                            )
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(self.THREADS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []

        operations = self.THREADS * self.OPS_PER_THREAD
        with file_app.app_context():
            assert get_stock_quantity(product_id) == 1000
            assert db.session.query(InventoryAdjustment).count() == operations // 2
            assert db.session.query(Sale).count() == operations // 2
            assert db.session.get(Product, product_id).version_id == 1 + operations

    def test_lost_version_race_is_storage_failure(self, file_app):
        with file_app.app_context():
            db.create_all()
            _, product_id = self._seed()
            product = db.session.get(Product, product_id)
            assert product.version_id == 1

            # another connection writes the row behind the session's back
            products = Product.__table__
            with db.engine.begin() as conn:
                conn.execute(
                    products.update()
                    .where(products.c.id == product_id)
                    .values(stock_quantity=7, version_id=2)
                )

            with pytest.raises(StorageFailure) as excinfo:
                with atomic("adjust inventory"):
                    product.stock_quantity = 20

            assert excinfo.value.details == {"reason": "StaleDataError"}
            assert get_stock_quantity(product_id) == 7
