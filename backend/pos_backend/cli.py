# Overview: Flask CLI command groups for bootstrap and stock maintenance.

# backend/pos_backend/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Idempotent: create demo operators (admin, cashier1) and the demo product catalog.
#
# Stock maintenance:
# - python -m flask inventory stock 1
#   Print the current stock of product 1.
# - python -m flask inventory adjust 1 50 --type restock --user-id 1 --reason "Weekly delivery"
#   Apply an audited stock adjustment. Negative deltas go after "--":
# - python -m flask inventory adjust --type shrinkage --user-id 1 -- 1 -3

from decimal import Decimal

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Product, ADJUSTMENT_TYPES
from .services import inventory_service
from .services.errors import PosError


DEMO_USERS = [
    {"username": "admin", "email": "admin@pos.local", "role": "admin"},
    {"username": "cashier1", "email": "cashier1@pos.local", "role": "cashier"},
]

DEMO_PRODUCTS = [
    # barcode, name, price, cost, stock, min stock, tax rate
    ("049000000443", "Coca-Cola 12oz Can", "1.50", "0.75", 100, 20, "0.08"),
    ("049000000450", "Pepsi 12oz Can", "1.50", "0.75", 80, 20, "0.08"),
    ("049000000467", "Sprite 12oz Can", "1.50", "0.75", 60, 20, "0.08"),
    ("028400000123", "Lays Classic Chips", "2.25", "1.00", 75, 15, "0.08"),
    ("040000000087", "Snickers Bar", "1.75", "0.85", 120, 25, "0.08"),
    ("012345678901", "Marlboro Red Pack", "8.50", "6.00", 50, 10, "0.25"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Schema created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to load demo data.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Create demo operators and products. Existing rows are left untouched."""
    for spec in DEMO_USERS:
        if db.session.query(User).filter_by(username=spec["username"]).first():
            click.echo(f"SKIP User {spec['username']} already exists")
            continue
        db.session.add(User(**spec))
        click.echo(f"PASS Created user {spec['username']} ({spec['role']})")

    for barcode, name, price, cost, stock, min_stock, tax_rate in DEMO_PRODUCTS:
        if db.session.query(Product).filter_by(barcode=barcode).first():
            click.echo(f"SKIP Product {barcode} already exists")
            continue
        db.session.add(Product(
            barcode=barcode,
            name=name,
            price=Decimal(price),
            cost=Decimal(cost),
            stock_quantity=stock,
            min_stock_level=min_stock,
            tax_rate=Decimal(tax_rate),
        ))
        click.echo(f"PASS Created product {name}")

    db.session.commit()


@click.group('inventory')
def inventory_group():
    """Stock inspection and audited adjustments."""


@inventory_group.command('stock')
@click.argument('product_id', type=int)
@with_appcontext
def show_stock(product_id):
    """Print the current stock of a product."""
    try:
        quantity = inventory_service.get_stock_quantity(product_id)
    except PosError as e:
        raise click.ClickException(e.message)
    click.echo(f"Product {product_id}: {quantity} in stock")


@inventory_group.command('adjust')
@click.argument('product_id', type=int)
@click.argument('quantity_change', type=int)
@click.option('--type', 'adjustment_type', type=click.Choice(ADJUSTMENT_TYPES), default='correction', show_default=True)
@click.option('--user-id', type=int, required=True, help='Operator recorded on the adjustment')
@click.option('--reason', default=None, help='Free-text reason')
@with_appcontext
def adjust_stock(product_id, quantity_change, adjustment_type, user_id, reason):
    """Apply an audited stock adjustment."""
    try:
        adjustment = inventory_service.adjust_inventory(
            product_id=product_id,
            adjustment_type=adjustment_type,
            quantity_change=quantity_change,
            user_id=user_id,
            reason=reason,
        )
    except PosError as e:
        raise click.ClickException(e.message)

    click.echo(
        f"PASS Adjustment #{adjustment.id}: product {adjustment.product_id} "
        f"{adjustment.old_quantity} -> {adjustment.new_quantity}"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(inventory_group)
