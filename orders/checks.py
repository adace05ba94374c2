"""
Purchase Order consistency checks.

Checks:
  Units:      ordered units per destination vs units on that destination's
              shipment (they are allowed to drift; this only reports it)
  Split:      po_splits_confirmed set with no shipments recorded
  Readiness:  SKUs / barcodes / polybags not yet done
  Shipments:  checklist complete but status not booked in, unknown status
"""
import logging

from models.purchase_order import (
    READINESS_FIELDS, SHIPMENT_STATUSES, CHECKLIST_FIELDS, Destination, PurchaseOrder,
)
from models.result import Discrepancy
from .aggregator import is_booked_in, order_units_by_destination

logger = logging.getLogger(__name__)

_READINESS_LABELS = {
    "skus_created": "SKUs not created",
    "barcodes_sent": "Barcodes not sent",
    "polybags_sent": "Polybags not sent",
}


class OrderChecker:
    """
    Produces a list of Discrepancy objects for a Purchase Order.

    Usage:
        checker = OrderChecker()
        discrepancies = checker.check(po)
    """

    def check(self, po: PurchaseOrder) -> list[Discrepancy]:
        """Run all checks and return combined discrepancies list."""
        issues: list[Discrepancy] = []
        issues.extend(self._check_units(po))
        issues.extend(self._check_split(po))
        issues.extend(self._check_readiness(po))
        issues.extend(self._check_shipments(po))
        if issues:
            logger.debug("PO %s: %d discrepancies", po.id, len(issues))
        return issues

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def _check_units(self, po: PurchaseOrder) -> list[Discrepancy]:
        # Imported POs carry no line items, so there is nothing to compare
        if not po.lines:
            return []

        issues = []
        ordered = order_units_by_destination(po)
        for destination, key in ((Destination.UK, "uk"), (Destination.US, "usa")):
            shipment = po.shipment_for(destination)
            if shipment is None:
                continue
            if shipment.units != ordered[key]:
                issues.append(Discrepancy(
                    type="units_diverged",
                    severity="warning",
                    description=(
                        f"{shipment.shipment_ref} carries {shipment.units} units; "
                        f"line items order {ordered[key]} for {destination.value}"
                    ),
                    field="units",
                    destination=destination,
                    ordered_value=str(ordered[key]),
                    actual_value=str(shipment.units),
                ))
        return issues

    # ------------------------------------------------------------------
    # Split
    # ------------------------------------------------------------------

    def _check_split(self, po: PurchaseOrder) -> list[Discrepancy]:
        if po.po_splits_confirmed and not po.shipments:
            return [Discrepancy(
                type="split_without_shipments",
                severity="warning",
                description="PO is marked split but has no shipments",
                field="po_splits_confirmed",
            )]
        return []

    # ------------------------------------------------------------------
    # Readiness flags
    # ------------------------------------------------------------------

    def _check_readiness(self, po: PurchaseOrder) -> list[Discrepancy]:
        return [
            Discrepancy(
                type="readiness_outstanding",
                severity="info",
                description=_READINESS_LABELS[name],
                field=name,
            )
            for name in READINESS_FIELDS
            if not getattr(po, name)
        ]

    # ------------------------------------------------------------------
    # Shipments
    # ------------------------------------------------------------------

    def _check_shipments(self, po: PurchaseOrder) -> list[Discrepancy]:
        issues = []
        for sh in po.shipments:
            if sh.status not in SHIPMENT_STATUSES:
                issues.append(Discrepancy(
                    type="unknown_status",
                    severity="info",
                    description=f"{sh.shipment_ref} has an unrecognised status: {sh.status!r}",
                    field="status",
                    destination=sh.destination,
                    actual_value=sh.status,
                ))
            checklist_done = all(getattr(sh, f) for f in CHECKLIST_FIELDS)
            if checklist_done and not is_booked_in(sh.status):
                issues.append(Discrepancy(
                    type="checklist_complete_not_booked_in",
                    severity="info",
                    description=(
                        f"{sh.shipment_ref} receiving checklist is complete "
                        f"but status is {sh.status!r}"
                    ),
                    field="status",
                    destination=sh.destination,
                    actual_value=sh.status,
                ))
        return issues
