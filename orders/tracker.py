"""Flattened shipment rows for the tracker view."""
from typing import Iterable, Optional

from models.purchase_order import Destination, PurchaseOrder


def shipment_rows(
    pos: Iterable[PurchaseOrder],
    status: Optional[str] = None,
    destination: Optional[Destination] = None,
    search: Optional[str] = None,
) -> list[dict]:
    """
    One row per shipment, carrying the owning PO's supplier and season.

    Args:
        status:       Exact shipment status to keep.
        destination:  Keep only shipments bound for this DC.
        search:       Case-insensitive substring of shipment_ref, supplier
                      name or supplier ref.
    """
    needle = (search or "").strip().lower()
    rows = []
    for po in pos:
        for sh in po.shipments:
            if status and sh.status != status:
                continue
            if destination and sh.destination != destination:
                continue
            if needle and not any(
                needle in (value or "").lower()
                for value in (sh.shipment_ref, po.supplier_name, po.supplier_ref)
            ):
                continue
            rows.append({
                **sh.model_dump(mode="json"),
                "supplier_name": po.supplier_name,
                "supplier_ref": po.supplier_ref,
                "seasonality": po.seasonality,
                "ex_factory_date": po.ex_factory_date,
            })
    return rows
