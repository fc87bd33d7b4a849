# Overview: Flask CLI command groups for GL posting and inventory inspection.

# backend/ledgerpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Ledger posting:
# - python -m flask ledger post-pending [--business-unit-id 1] [--limit 100]
#   Retry GL posting for settled orders whose posting is PENDING or FAILED.
# - python -m flask ledger validate-config --business-unit-id 1
#   Check accounts, numbering series and open period for a business unit.
#
# Inventory:
# - python -m flask inventory negative-stock [--business-unit-id 1]
#   List stock rows that went negative after sales.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import BusinessUnit
from .services import gl_posting_service
from .services.depletion_service import list_negative_stock


@click.group('ledger')
def ledger_group():
    """GL posting commands."""


@ledger_group.command('post-pending')
@click.option('--business-unit-id', type=int, default=None, help='Limit to one business unit')
@click.option('--limit', type=int, default=100, show_default=True)
@with_appcontext
def post_pending_cli(business_unit_id, limit):
    """Post settled orders whose GL posting is PENDING or FAILED."""
    results = gl_posting_service.post_pending_orders(business_unit_id=business_unit_id, limit=limit)
    if not results:
        click.echo("Nothing to post.")
        return

    failed = 0
    for order_id, outcome in results:
        if outcome.posted:
            click.echo(f"PASS order {order_id} -> {outcome.document_number}")
        else:
            failed += 1
            message = (outcome.error or {}).get("message", "unknown error")
            click.echo(f"FAIL order {order_id}: {message}")

    click.echo(f"\nPosted {len(results) - failed}/{len(results)} orders.")
    if failed:
        raise SystemExit(1)


@ledger_group.command('validate-config')
@click.option('--business-unit-id', type=int, required=True)
@with_appcontext
def validate_config_cli(business_unit_id):
    """Validate POS accounting configuration for a business unit."""
    business_unit = db.session.query(BusinessUnit).filter_by(id=business_unit_id).first()
    if not business_unit:
        click.echo(f"FAIL Business unit {business_unit_id} not found")
        raise SystemExit(1)

    result = gl_posting_service.validate_configuration(business_unit_id)
    for issue in result["issues"]:
        click.echo(f"FAIL {issue}")
    for warning in result["warnings"]:
        click.echo(f"WARN {warning}")

    if result["is_valid"]:
        click.echo(f"PASS {business_unit.name}: configuration is valid")
    else:
        click.echo(f"FAIL {business_unit.name}: {len(result['issues'])} issue(s)")
        raise SystemExit(1)


@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command('negative-stock')
@click.option('--business-unit-id', type=int, default=None)
@with_appcontext
def negative_stock_cli(business_unit_id):
    """List stock rows with negative quantity on hand."""
    rows = list_negative_stock(business_unit_id)
    if not rows:
        click.echo("No negative stock.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'Stock':<8} {'SKU':<20} {'Location':<10} {'On hand'}")
    click.echo("="*70)
    for stock in rows:
        sku = stock.inventory_item.sku if stock.inventory_item else "-"
        click.echo(f"{stock.id:<8} {sku:<20} {stock.location_id:<10} {stock.quantity_on_hand}")
    click.echo("="*70 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(ledger_group)
    app.cli.add_command(inventory_group)
