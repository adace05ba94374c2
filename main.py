#!/usr/bin/env python3
"""
Operations Tracker — CLI entry point.

Usage examples:
  python main.py check                              # Verify setup (database, config)
  python main.py list                               # All POs with split state and totals
  python main.py list --unsplit                     # Only POs still awaiting their split
  python main.py show GWG048                        # One PO, its shipments and discrepancies
  python main.py import "PO management.xlsx"        # Import a PO sheet (.xlsx or .csv)
  python main.py import sheet.csv --dry-run         # Show what would be created
  python main.py split GWG049                       # Split into UK + USA sea shipments
  python main.py split GWG049 --no-usa --mode AIR   # UK air shipment only
  python main.py suppliers --search knit            # Search the supplier list
  python main.py serve --port 8000                  # Run the dashboard API
"""
import logging
import sys
from pathlib import Path

import click

from config import Config
from models.purchase_order import Destination, ShipmentMode, SplitState
from models.result import SplitSelection
from orders.aggregator import order_summary
from orders.checks import OrderChecker
from orders.database import Database, StoreError
from orders.import_reconciler import ImportReconciler
from orders.split_planner import confirm_split
from orders.supplier_matcher import SupplierMatcher


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quieten noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _open_db(ctx: click.Context) -> Database:
    config: Config = ctx.obj["config"]
    config.ensure_output_dir()
    try:
        return Database(config.db_path)
    except StoreError as exc:
        _fail(str(exc))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--db", "db_path", default=None, type=click.Path(), help="Database file (default: DB_PATH or output/operations.db)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, db_path: str | None) -> None:
    """Operations Tracker — purchase orders, shipments, suppliers and stock."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)
    config = Config()
    if db_path:
        config.db_path = Path(db_path)
    ctx.obj["config"] = config


# --------------------------------------------------------------------
# check command
# --------------------------------------------------------------------

@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Verify that the database and configuration files are ready."""
    config: Config = ctx.obj["config"]
    db = _open_db(ctx)

    click.echo("\n=== Setup Check ===\n")
    click.echo(f"  Database:          ✓  {config.db_path}")
    try:
        pos = db.list_purchase_orders()
        suppliers = db.list_suppliers()
        products = db.list_products()
    except StoreError as exc:
        _fail(str(exc))
    unsplit = sum(1 for po in pos if po.split_state == SplitState.UNSPLIT)
    click.echo(f"  Purchase orders:   {len(pos)} ({unsplit} unsplit)")
    click.echo(f"  Suppliers:         {len(suppliers)}")
    click.echo(f"  Products:          {len(products)}")
    click.echo()

    settings_file = config.config_dir / "settings.json"
    tick = "✓" if settings_file.exists() else "–"
    click.echo(f"  settings.json      {tick}  {settings_file}")
    template = config.config_dir / config.export_template
    tick = "✓" if template.exists() else "–"
    note = "" if template.exists() else "  (built-in template in use)"
    click.echo(f"  Export template    {tick}  {template}{note}")
    click.echo()
    click.echo(f"  Default currency:  {config.default_currency}")
    click.echo(f"  Default season:    {config.default_season}")
    click.echo()


# --------------------------------------------------------------------
# list / show commands
# --------------------------------------------------------------------

@cli.command("list")
@click.option("--search", "-s", default=None, help="Match PO id, supplier name or supplier ref")
@click.option("--unsplit", is_flag=True, help="Only POs that have not been split yet")
@click.pass_context
def list_orders(ctx: click.Context, search: str | None, unsplit: bool) -> None:
    """List purchase orders with split state, units and totals."""
    db = _open_db(ctx)
    try:
        pos = db.list_purchase_orders(search=search)
    except StoreError as exc:
        _fail(str(exc))

    if unsplit:
        pos = [po for po in pos if po.split_state == SplitState.UNSPLIT]
    if not pos:
        click.echo("No purchase orders found.")
        return

    click.echo(f"\n  {'PO':<14} {'Supplier':<24} {'Season':<7} {'State':<8} {'Ships':>5} {'Units':>7} {'Total':>12}")
    for po in pos:
        s = order_summary(po)
        click.echo(
            f"  {po.id:<14} {po.supplier_name[:24]:<24} {po.seasonality:<7} "
            f"{s['split_state']:<8} {s['shipment_count']:>5} {s['total_units']:>7} "
            f"{po.currency} {s['grand_total']:>8.2f}"
        )
    click.echo(f"\n  {len(pos)} purchase orders")


@cli.command()
@click.argument("po_id")
@click.pass_context
def show(ctx: click.Context, po_id: str) -> None:
    """Show one PO with its shipments and any discrepancies."""
    db = _open_db(ctx)
    try:
        po = db.get_purchase_order(po_id)
    except StoreError as exc:
        _fail(str(exc))
    if po is None:
        _fail(f"Purchase order not found: {po_id}")

    s = order_summary(po)
    click.echo()
    click.echo(f"  PO:          {po.id}  ({s['split_state']})")
    click.echo(f"  Supplier:    {po.supplier_name or '(unknown)'}  {po.supplier_ref}")
    click.echo(f"  Season:      {po.seasonality or '-'}")
    click.echo(f"  Ex-factory:  {po.ex_factory_date or '-'}")
    click.echo(f"  Lines:       {s['line_count']}  (UK {s['total_uk']}, USA {s['total_usa']})")
    click.echo(f"  Grand total: {po.currency} {s['grand_total']:.2f}")
    click.echo()

    for sh in po.shipments:
        click.echo(f"    {sh.shipment_ref:<16} {sh.status:<36} {sh.units:>6} units  ETA {sh.eta or '-'}")
    if po.shipments:
        click.echo()

    issues = OrderChecker().check(po)
    if issues:
        click.echo(f"  Discrepancies ({len(issues)}):")
        for d in issues:
            icon = "✗" if d.severity == "error" else ("⚠" if d.severity == "warning" else "ℹ")
            click.echo(f"    {icon} [{d.severity.upper()}] {d.description}")
    else:
        click.echo("  ✓ No discrepancies found")
    click.echo()


# --------------------------------------------------------------------
# import command
# --------------------------------------------------------------------

@cli.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Reconcile and report without writing anything")
@click.pass_context
def import_file(ctx: click.Context, file: str, dry_run: bool) -> None:
    """
    Import a PO management sheet (.xlsx or .csv).

    \b
    Rows are grouped by base PO id (GWG048UKSEA and GWG048USASEA both
    belong to GWG048). Each PO is created together with its shipments;
    a PO that already exists is reported and skipped.
    """
    config: Config = ctx.obj["config"]
    db = _open_db(ctx)
    try:
        reconciler = ImportReconciler(
            supplier_matcher=SupplierMatcher(db.list_suppliers(), config.supplier_fuzzy_threshold),
            default_currency=config.default_currency,
        )
        report = reconciler.import_file(db, Path(file), dry_run=dry_run)
    except (StoreError, ValueError) as exc:
        _fail(str(exc))

    click.echo()
    click.echo(f"  Rows loaded:        {report.rows_loaded}")
    if report.rows_skipped:
        click.echo(f"  Blank rows skipped: {report.rows_skipped}")
    verb = "Would create" if dry_run else "Created"
    click.echo(f"  {verb}:  {len(report.created)} POs, {report.shipments_created} shipments")
    if report.skipped:
        click.echo(f"  ⚠  {len(report.skipped)} POs skipped:")
        for po_id, reason in report.skipped.items():
            click.echo(f"     {po_id}: {reason}")
    click.echo()


# --------------------------------------------------------------------
# split command
# --------------------------------------------------------------------

@cli.command()
@click.argument("po_id")
@click.option("--uk/--no-uk", default=True, help="Create a UK shipment")
@click.option("--usa/--no-usa", default=True, help="Create a USA shipment")
@click.option(
    "--mode", "-m", default="SEA", show_default=True,
    type=click.Choice([m.value for m in ShipmentMode], case_sensitive=False),
    help="Transport mode for the new shipments",
)
@click.option("--uk-units", type=click.IntRange(min=0), default=None, help="Override UK units (default: line-item qty_uk)")
@click.option("--usa-units", type=click.IntRange(min=0), default=None, help="Override USA units (default: line-item qty_usa)")
@click.pass_context
def split(
    ctx: click.Context,
    po_id: str,
    uk: bool,
    usa: bool,
    mode: str,
    uk_units: int | None,
    usa_units: int | None,
) -> None:
    """Split PO_ID into per-destination shipments."""
    db = _open_db(ctx)
    mode_value = ShipmentMode(mode.upper())
    selections = []
    if uk:
        selections.append(SplitSelection(destination=Destination.UK, mode=mode_value, units=uk_units))
    if usa:
        selections.append(SplitSelection(destination=Destination.US, mode=mode_value, units=usa_units))

    try:
        po = db.get_purchase_order(po_id)
        if po is None:
            _fail(f"Purchase order not found: {po_id}")
        po = confirm_split(db, po, selections)
    except (StoreError, ValueError) as exc:
        _fail(str(exc))

    click.echo(f"\n  ✓ {po.id} split:")
    for sh in po.shipments:
        click.echo(f"    {sh.shipment_ref:<16} {sh.units:>6} units  ({sh.status})")
    click.echo()


# --------------------------------------------------------------------
# suppliers command
# --------------------------------------------------------------------

@cli.command()
@click.option("--search", "-s", default=None, help="Match name, code, product types or country")
@click.pass_context
def suppliers(ctx: click.Context, search: str | None) -> None:
    """List suppliers."""
    db = _open_db(ctx)
    try:
        rows = db.list_suppliers(search=search)
    except StoreError as exc:
        _fail(str(exc))
    if not rows:
        click.echo("No suppliers found.")
        return
    for s in rows:
        status = "" if s.is_active else "  (inactive)"
        click.echo(f"  {s.code or '-':<6} {s.name:<32} {s.country_of_origin:<14} {s.product_types}{status}")


# --------------------------------------------------------------------
# serve command
# --------------------------------------------------------------------

@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Run the dashboard API with uvicorn."""
    import uvicorn

    from dashboard import app as dashboard_app

    dashboard_app._config = ctx.obj["config"]
    click.echo(f"\n  Dashboard API on http://{host}:{port}/api/health\n")
    uvicorn.run(dashboard_app.app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
