"""
Totals over Purchase Orders, shipments and inventory snapshots.

Everything here is a pure function of its inputs: nothing is cached or
persisted, so totals are recomputed on every read and the order of line
items or shipments never changes a result.
"""
from typing import Iterable

from models.inventory import Product
from models.purchase_order import SIZES, LineItem, PurchaseOrder, Shipment, SplitState

IN_PRODUCTION = "In production"
IN_TRANSIT_MARKER = "transit"
BOOKED_IN_MARKER = "booked in"


def is_booked_in(status: str) -> bool:
    """True for both booked-in lifecycle stages, whatever their casing."""
    return BOOKED_IN_MARKER in (status or "").lower()


def line_total(line: LineItem) -> float:
    """(qty_uk + qty_usa) * cost_price, with missing values counted as zero."""
    return ((line.qty_uk or 0) + (line.qty_usa or 0)) * (line.cost_price or 0)


def order_total(po: PurchaseOrder) -> float:
    return sum(line_total(line) for line in po.lines)


def order_units_by_destination(po: PurchaseOrder) -> dict[str, int]:
    """Ordered units per distribution centre, from the line items."""
    return {
        "uk": sum(line.qty_uk or 0 for line in po.lines),
        "usa": sum(line.qty_usa or 0 for line in po.lines),
    }


def order_confirmed_xf(po: PurchaseOrder) -> int:
    return sum(line.confirmed_xf or 0 for line in po.lines)


def shipment_units_total(po: PurchaseOrder) -> int:
    """
    Units across the PO's shipments.

    Independent of the line-item quantities: once split, the shipments are
    the source of truth for what is actually moving.
    """
    return sum(shipment.units or 0 for shipment in po.shipments)


def order_summary(po: PurchaseOrder) -> dict:
    """Derived figures shown alongside a PO (never persisted)."""
    units = order_units_by_destination(po)
    return {
        "line_count": len(po.lines),
        "shipment_count": len(po.shipments),
        "total_uk": units["uk"],
        "total_usa": units["usa"],
        "total_confirmed_xf": order_confirmed_xf(po),
        "total_units": shipment_units_total(po),
        "grand_total": round(order_total(po), 2),
        "split_state": po.split_state.value,
    }


# ------------------------------------------------------------------
# Shipment tracker KPIs
# ------------------------------------------------------------------

def shipment_kpis(pos: Iterable[PurchaseOrder]) -> dict:
    """Counts over every shipment of every PO, as shown on the tracker header."""
    pos = list(pos)
    shipments: list[Shipment] = [sh for po in pos for sh in po.shipments]
    in_transit = [sh for sh in shipments if IN_TRANSIT_MARKER in (sh.status or "")]
    return {
        "total_pos": len(pos),
        "total_shipments": len(shipments),
        "in_production": sum(1 for sh in shipments if sh.status == IN_PRODUCTION),
        "in_transit": len(in_transit),
        "units_in_transit": sum(sh.units or 0 for sh in in_transit),
        "booked_in": sum(1 for sh in shipments if is_booked_in(sh.status)),
        "unsplit_pos": sum(1 for po in pos if po.split_state == SplitState.UNSPLIT),
    }


# ------------------------------------------------------------------
# Inventory
# ------------------------------------------------------------------

def product_units(product: Product) -> int:
    return sum(product.sizes.get(size, 0) or 0 for size in SIZES)


def inventory_units(products: Iterable[Product]) -> int:
    return sum(product_units(p) for p in products)


def low_stock_rows(products: Iterable[Product], threshold: int) -> list[dict]:
    """One row per (product, size) whose stock is below *threshold*."""
    rows = []
    for p in products:
        for size in SIZES:
            qty = p.sizes.get(size, 0) or 0
            if qty < threshold:
                rows.append({"id": p.id, "name": p.name, "warehouse": p.warehouse,
                             "size": size, "qty": qty})
    return rows


def inventory_summary(products: Iterable[Product], threshold: int) -> dict:
    products = list(products)
    low = low_stock_rows(products, threshold)
    return {
        "skus": len(products),
        "total_units": inventory_units(products),
        "low_stock_products": len({row["id"] for row in low}),
        "low_stock": low,
    }
