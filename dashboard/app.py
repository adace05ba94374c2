"""
Operations Dashboard — FastAPI backend.

Serves the JSON API behind the purchase order, shipment tracker, supplier
and inventory screens.

All state lives in a single SQLite database (output/operations.db). Every
request re-reads current state; nothing is cached between requests.

Endpoints
---------
  GET    /api/health                               → liveness probe
  GET    /api/stats                                → tracker KPIs + inventory counts
  GET    /api/purchase-orders                      → POs with lines, shipments, summary (?search=)
  POST   /api/purchase-orders                      → create PO (optionally with shipments)
  GET    /api/purchase-orders/{po_id}              → one PO
  PATCH  /api/purchase-orders/{po_id}              → update PO fields / readiness flags
  POST   /api/purchase-orders/{po_id}/split        → confirm split into shipments
  POST   /api/purchase-orders/{po_id}/shipments    → add the missing destination shipment
  GET    /api/purchase-orders/{po_id}/checks       → unit divergence / readiness discrepancies
  GET    /api/purchase-orders/{po_id}/export       → PO as XML (Jinja2 template)
  GET    /api/purchase-orders/{po_id}/audit        → audit trail for one PO
  GET    /api/shipments                            → tracker rows (?status= &dc= &search=)
  PATCH  /api/shipments/{shipment_id}              → update one shipment
  POST   /api/import                               → upload .xlsx / .csv PO sheet (?dry_run=)
  GET    /api/suppliers                            → supplier list (?search=)
  POST   /api/suppliers                            → create supplier
  PATCH  /api/suppliers/{supplier_id}              → update supplier
  DELETE /api/suppliers/{supplier_id}              → delete supplier
  GET    /api/products                             → inventory snapshot (?warehouse= &search=)
  PATCH  /api/products/{product_id}/sizes          → replace per-size stock
  GET    /api/inventory/summary                    → units, low-stock rows
  GET    /api/audit                                → recent audit entries
"""
import logging
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from config import Config
from dashboard.models import (
    AddShipmentRequest, ProductSizesUpdate, PurchaseOrderCreate, PurchaseOrderUpdate,
    ShipmentUpdate, SplitRequest, SupplierCreate, SupplierUpdate,
)
from dashboard.services import build_export_payload, render_export_xml
from models.purchase_order import Destination, PurchaseOrder
from models.supplier import Supplier
from orders.aggregator import inventory_summary, order_summary, shipment_kpis
from orders.checks import OrderChecker
from orders.database import Database, DuplicateRecordError, RecordNotFoundError, StoreError
from orders.import_reconciler import ImportReconciler
from orders.split_planner import (
    SplitError, confirm_split, plan_additional_shipment, plan_new_order,
)
from orders.supplier_matcher import SupplierMatcher
from orders.tabular import TableReadError, read_table_bytes
from orders.tracker import shipment_rows

logger = logging.getLogger(__name__)

ACTOR = "dashboard"

# ---------------------------------------------------------------------------
# Config + database (lazy — opened on first request)
# ---------------------------------------------------------------------------
_config: Optional[Config] = None
_db: Optional[Database] = None


def get_config() -> Config:
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_db() -> Database:
    global _db
    if _db is None:
        config = get_config()
        config.ensure_output_dir()
        _db = Database(config.db_path)
    return _db


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(title="Operations Dashboard", docs_url=None, redoc_url=None)


# ── Error mapping ────────────────────────────────────────────────────────────

@app.exception_handler(RecordNotFoundError)
async def _not_found(request, exc: RecordNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(DuplicateRecordError)
async def _duplicate(request, exc: DuplicateRecordError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def _store_failure(request, exc: StoreError):
    logger.error("Store failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Database unavailable, please retry"})


@app.exception_handler(ValidationError)
async def _invalid(request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(SplitError)
async def _split_rejected(request, exc: SplitError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def _bad_request(request, exc: ValueError):
    # Immutable or unknown fields in an update
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ── Helpers ──────────────────────────────────────────────────────────────────

def _po_payload(po: PurchaseOrder) -> dict:
    return {
        **po.model_dump(mode="json"),
        "split_state": po.split_state.value,
        "summary": order_summary(po),
    }


def _require_po(po_id: str) -> PurchaseOrder:
    po = get_db().get_purchase_order(po_id)
    if po is None:
        raise HTTPException(status_code=404, detail=f"Purchase order not found: {po_id}")
    return po


# ── Routes ───────────────────────────────────────────────────────────────────

@app.get("/api/health")
def health():
    config = get_config()
    return {
        "status":    "ok",
        "db_path":   str(config.db_path),
        "db_exists": config.db_path.exists(),
    }


@app.get("/api/stats")
def stats():
    db = get_db()
    pos = db.list_purchase_orders()
    inventory = inventory_summary(db.list_products(), get_config().low_stock_threshold)
    return {
        **shipment_kpis(pos),
        "active_suppliers": sum(1 for s in db.list_suppliers() if s.is_active),
        "inventory_units":  inventory["total_units"],
        "low_stock_rows":   len(inventory["low_stock"]),
    }


# ── Purchase orders ──────────────────────────────────────────────────────────

@app.get("/api/purchase-orders")
def list_purchase_orders(search: Optional[str] = Query(default=None)):
    return [_po_payload(po) for po in get_db().list_purchase_orders(search=search or None)]


@app.post("/api/purchase-orders", status_code=201)
def create_purchase_order(body: PurchaseOrderCreate):
    """
    Create a PO with its line items.

    uk_shipment / usa_shipment create the matching shipments in the same
    transaction. Selecting both confirms the split.
    """
    db = get_db()
    config = get_config()
    po = PurchaseOrder(
        id=body.id.strip() or db.next_po_id(),
        supplier_id=body.supplier_id,
        supplier_name=body.supplier_name,
        supplier_ref=body.supplier_ref,
        seasonality=body.seasonality or config.default_season,
        currency=body.currency or config.default_currency,
        ex_factory_date=body.ex_factory_date,
        total_cost_value=body.total_cost_value,
        deposit_cost_value=body.deposit_cost_value,
        deposit_payment_date=body.deposit_payment_date,
        notes=body.notes,
    )
    destinations = [
        d for d, selected in ((Destination.UK, body.uk_shipment), (Destination.US, body.usa_shipment))
        if selected
    ]
    plan = plan_new_order(po, body.lines, destinations, body.mode)
    created = db.create_purchase_order(
        plan.purchase_order, plan.purchase_order.lines, plan.shipments, actor=ACTOR
    )
    return _po_payload(created)


@app.get("/api/purchase-orders/{po_id}")
def get_purchase_order(po_id: str):
    return _po_payload(_require_po(po_id))


@app.patch("/api/purchase-orders/{po_id}")
def update_purchase_order(po_id: str, body: PurchaseOrderUpdate):
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(400, "No fields to update")
    return _po_payload(get_db().update_purchase_order(po_id, fields, actor=ACTOR))


@app.post("/api/purchase-orders/{po_id}/split")
def split_purchase_order(po_id: str, body: SplitRequest):
    """Create one shipment per selected destination and mark the PO split."""
    db = get_db()
    po = confirm_split(db, _require_po(po_id), body.selections)
    return _po_payload(po)


@app.post("/api/purchase-orders/{po_id}/shipments", status_code=201)
def add_shipment(po_id: str, body: AddShipmentRequest):
    """Add a 0-unit shipment for a destination the PO does not ship to yet."""
    db = get_db()
    shipment = plan_additional_shipment(_require_po(po_id), body.destination, body.mode)
    return db.add_shipment(shipment, actor=ACTOR).model_dump(mode="json")


@app.get("/api/purchase-orders/{po_id}/checks")
def check_purchase_order(po_id: str):
    issues = OrderChecker().check(_require_po(po_id))
    return [d.model_dump(mode="json") for d in issues]


@app.get("/api/purchase-orders/{po_id}/export")
def export_purchase_order(po_id: str):
    db = get_db()
    config = get_config()
    po = _require_po(po_id)
    supplier = db.get_supplier(po.supplier_id) if po.supplier_id else None
    xml = render_export_xml(
        build_export_payload(po, supplier),
        template_file=config.config_dir / config.export_template,
    )
    logger.info("Exported PO %s as XML", po_id)
    return Response(
        content=xml,
        media_type="application/xml",
        headers={"Content-Disposition": f'attachment; filename="{po_id}.xml"'},
    )


@app.get("/api/purchase-orders/{po_id}/audit")
def purchase_order_audit(po_id: str):
    _require_po(po_id)
    return get_db().get_audit_log(po_id)


# ── Shipments ────────────────────────────────────────────────────────────────

@app.get("/api/shipments")
def list_shipments(
    status: Optional[str] = Query(default=None),
    dc: Optional[Destination] = Query(default=None),
    search: Optional[str] = Query(default=None),
):
    pos = get_db().list_purchase_orders()
    return shipment_rows(pos, status=status or None, destination=dc, search=search)


@app.patch("/api/shipments/{shipment_id}")
def update_shipment(shipment_id: int, body: ShipmentUpdate):
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(400, "No fields to update")
    return get_db().update_shipment(shipment_id, fields, actor=ACTOR).model_dump(mode="json")


# ── Import ───────────────────────────────────────────────────────────────────

@app.post("/api/import")
async def import_sheet(
    file: UploadFile = File(...),
    dry_run: bool = Query(default=False),
):
    """
    Import a PO management sheet.

    Rows are grouped by base PO id. Each PO is created together with its
    shipments; a PO that cannot be created (e.g. it already exists) is
    reported under "skipped" and the rest of the file still imports.
    """
    contents = await file.read()
    if len(contents) == 0:
        raise HTTPException(400, "Uploaded file is empty")
    try:
        rows = read_table_bytes(contents, file.filename or "")
    except TableReadError as exc:
        raise HTTPException(400, str(exc)) from exc

    db = get_db()
    config = get_config()
    reconciler = ImportReconciler(
        supplier_matcher=SupplierMatcher(db.list_suppliers(), config.supplier_fuzzy_threshold),
        default_currency=config.default_currency,
    )
    report = reconciler.import_rows(db, rows, dry_run=dry_run)
    return report.model_dump(mode="json")


# ── Suppliers ────────────────────────────────────────────────────────────────

@app.get("/api/suppliers")
def list_suppliers(search: Optional[str] = Query(default=None)):
    return [s.model_dump(mode="json") for s in get_db().list_suppliers(search=search or None)]


@app.post("/api/suppliers", status_code=201)
def create_supplier(body: SupplierCreate):
    supplier = get_db().create_supplier(Supplier(**body.model_dump()), actor=ACTOR)
    return supplier.model_dump(mode="json")


@app.patch("/api/suppliers/{supplier_id}")
def update_supplier(supplier_id: int, body: SupplierUpdate):
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(400, "No fields to update")
    return get_db().update_supplier(supplier_id, fields, actor=ACTOR).model_dump(mode="json")


@app.delete("/api/suppliers/{supplier_id}")
def delete_supplier(supplier_id: int):
    if not get_db().delete_supplier(supplier_id, actor=ACTOR):
        raise HTTPException(404, f"Supplier not found: {supplier_id}")
    return {"id": supplier_id, "deleted": True}


# ── Inventory ────────────────────────────────────────────────────────────────

@app.get("/api/products")
def list_products(
    warehouse: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
):
    products = get_db().list_products(warehouse=warehouse or None, search=search or None)
    return [p.model_dump(mode="json") for p in products]


@app.patch("/api/products/{product_id}/sizes")
def update_product_sizes(product_id: str, body: ProductSizesUpdate):
    if not get_db().update_product_sizes(product_id, body.sizes, actor=ACTOR):
        raise HTTPException(404, f"Product not found: {product_id}")
    return {"id": product_id, "sizes": body.sizes}


@app.get("/api/inventory/summary")
def inventory(warehouse: Optional[str] = Query(default=None)):
    products = get_db().list_products(warehouse=warehouse or None)
    return inventory_summary(products, get_config().low_stock_threshold)


@app.get("/api/audit")
def recent_audit(
    limit: int = Query(default=200, le=2000),
    offset: int = Query(default=0, ge=0),
):
    return get_db().get_recent_audit_log(limit=limit, offset=offset)
