"""
Purchase Order splitting.

A PO starts Unsplit: no shipments, po_splits_confirmed False. Confirming a
split creates one Shipment per selected destination and moves the PO to
Split, which is terminal. After that, changes happen on individual
shipments only. Either destination may be left out.

Units for each shipment default to the line-item quantities ordered for
that destination (qty_uk for UK, qty_usa for US). The caller may override
them, and nothing keeps the two in step afterwards.
"""
import logging
from typing import Iterable, Optional

from models.purchase_order import (
    DEFAULT_SHIPMENT_STATUS, Destination, LineItem, PurchaseOrder, Shipment,
    ShipmentMode, SplitState,
)
from models.result import SplitPlan, SplitSelection
from .aggregator import order_units_by_destination
from .reference import build_reference

logger = logging.getLogger(__name__)


class SplitError(ValueError):
    """The split request cannot be applied to this PO."""


def prefill_units(po: PurchaseOrder, destination: Destination) -> int:
    """Units ordered for *destination* according to the PO's line items."""
    units = order_units_by_destination(po)
    return units["uk"] if destination == Destination.UK else units["usa"]


def new_shipment(
    po_id: str,
    destination: Destination,
    mode: ShipmentMode = ShipmentMode.SEA,
    units: int = 0,
) -> Shipment:
    """A fresh shipment: In production, checklist all False."""
    return Shipment(
        po_id=po_id,
        shipment_ref=build_reference(po_id, destination, mode),
        destination=destination,
        mode=mode,
        status=DEFAULT_SHIPMENT_STATUS,
        units=units,
    )


def plan_split(po: PurchaseOrder, selections: Iterable[SplitSelection]) -> SplitPlan:
    """
    Build the shipments for a split without touching storage.

    Raises SplitError when no destination is selected, when the PO is
    already split, or when two selections would produce the same reference.
    """
    selections = list(selections)
    if not selections:
        raise SplitError("Select at least one destination to split the PO")
    if not po.id:
        raise SplitError("PO has no id; it must be saved before splitting")
    if po.split_state == SplitState.SPLIT:
        raise SplitError(f"PO {po.id} is already split")

    shipments: list[Shipment] = []
    seen_refs: set[str] = set()
    for sel in selections:
        units = sel.units if sel.units is not None else prefill_units(po, sel.destination)
        shipment = new_shipment(po.id, sel.destination, sel.mode, units)
        if shipment.shipment_ref in seen_refs:
            raise SplitError(f"Duplicate split selection: {shipment.shipment_ref}")
        seen_refs.add(shipment.shipment_ref)
        shipments.append(shipment)

    planned = po.model_copy(update={
        "po_splits_confirmed": True,
        "shipments": [*po.shipments, *shipments],
    })
    return SplitPlan(purchase_order=planned, shipments=shipments)


def confirm_split(store, po: PurchaseOrder, selections: Iterable[SplitSelection]) -> PurchaseOrder:
    """Plan the split, persist it as one unit, and return the stored PO."""
    plan = plan_split(po, selections)
    store.record_split(po.id, plan.shipments)
    logger.info(
        "PO %s split into %s",
        po.id, ", ".join(f"{s.shipment_ref} ({s.units} units)" for s in plan.shipments),
    )
    return store.get_purchase_order(po.id)


def plan_additional_shipment(
    po: PurchaseOrder,
    destination: Destination,
    mode: ShipmentMode = ShipmentMode.SEA,
) -> Shipment:
    """Shipment for a destination the PO does not ship to yet (0 units)."""
    if po.shipment_for(destination) is not None:
        raise SplitError(f"PO {po.id} already has a {destination.value} shipment")
    return new_shipment(po.id, destination, mode, units=0)


def plan_new_order(
    po: PurchaseOrder,
    lines: list[LineItem],
    destinations: Optional[Iterable[Destination]] = None,
    mode: ShipmentMode = ShipmentMode.SEA,
) -> SplitPlan:
    """
    Shipments to create alongside a new PO.

    With both destinations selected the split counts as confirmed. With
    only one, the shipment is created but po_splits_confirmed stays False
    until the operator confirms it on the detail screen.
    """
    destinations = list(dict.fromkeys(destinations or []))
    draft = po.model_copy(update={"lines": list(lines), "shipments": []})
    if not destinations:
        return SplitPlan(purchase_order=draft)

    plan = plan_split(draft, [SplitSelection(destination=d, mode=mode) for d in destinations])
    confirmed = set(destinations) == {Destination.UK, Destination.US}
    planned = plan.purchase_order.model_copy(update={"po_splits_confirmed": confirmed})
    return SplitPlan(purchase_order=planned, shipments=plan.shipments)
