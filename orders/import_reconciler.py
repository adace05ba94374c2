"""
Spreadsheet import of Purchase Orders and their shipments.

Each data row of the PO management sheet is one shipment, or one PO that
has not been split yet. Rows are grouped by the base PO id of their
reference:

  GWG048UKSEA   ┐
  GWG048USASEA  ┴─ PO GWG048 with two shipments
  TSH096        ── PO TSH096, no shipments yet

The first row seen for a base seeds the PO's own fields. Each row whose
reference carries a destination+mode suffix becomes a Shipment.

Persisting is done group by group. Every (PO, shipments) pair is written as
one unit, and a failure on one group (e.g. the PO already exists) skips
that group only.
"""
import logging
from pathlib import Path
from typing import Optional

from models.purchase_order import (
    DEFAULT_SHIPMENT_STATUS, IMPORT_TAX_STATUSES, Destination, PurchaseOrder, Shipment,
)
from models.result import ImportGroup, ImportReport, ParsedReference
from .columns import ColumnResolver, RegexColumnResolver, RowReader, cell_text
from .database import StoreError
from .reference import parse_reference
from .supplier_matcher import SupplierMatcher
from .tabular import read_table

logger = logging.getLogger(__name__)

_DESTINATION_CELLS = {"UK": Destination.UK, "US": Destination.US, "USA": Destination.US}


class ImportReconciler:
    """
    Turns raw spreadsheet rows into PO + shipment groups and persists them.

    Usage:
        reconciler = ImportReconciler(supplier_matcher=SupplierMatcher(suppliers))
        groups = reconciler.reconcile(rows)
        report = reconciler.persist(store, groups)
    """

    def __init__(
        self,
        resolver: Optional[ColumnResolver] = None,
        supplier_matcher: Optional[SupplierMatcher] = None,
        default_currency: str = "USD",
    ):
        self.resolver = resolver or RegexColumnResolver()
        self.supplier_matcher = supplier_matcher
        self.default_currency = default_currency
        self.rows_skipped = 0

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def reconcile(self, rows: list[list]) -> list[ImportGroup]:
        """Group data rows (rows[0] is the header) by base PO id, first-seen order."""
        if not rows:
            return []

        headers = [cell_text(h) for h in rows[0]]
        columns = self.resolver.resolve(headers)
        if columns.get("reference") is None:
            # The PO management sheet keeps the reference in its first column
            columns["reference"] = 0
        reader = RowReader(columns)

        groups: dict[str, ImportGroup] = {}
        self.rows_skipped = 0

        for row in rows[1:]:
            parsed = parse_reference(reader.text(row, "reference"))
            if not parsed.base:
                self.rows_skipped += 1
                continue

            group = groups.get(parsed.base)
            if group is None:
                group = ImportGroup(purchase_order=self._seed_order(parsed.base, row, reader))
                groups[parsed.base] = group
            group.references.append(parsed)

            if not parsed.has_suffix:
                continue
            shipment = self._build_shipment(parsed, row, reader)
            if any(s.shipment_ref == shipment.shipment_ref for s in group.shipments):
                logger.warning("Duplicate shipment row %s ignored", shipment.shipment_ref)
                continue
            group.shipments.append(shipment)

        logger.info(
            "Reconciled %d rows into %d POs (%d shipments, %d blank rows skipped)",
            len(rows) - 1, len(groups),
            sum(len(g.shipments) for g in groups.values()), self.rows_skipped,
        )
        return list(groups.values())

    def _seed_order(self, base: str, row: list, reader: RowReader) -> PurchaseOrder:
        supplier_ref = reader.text(row, "supplier_ref")
        supplier_name = supplier_ref
        supplier_id = None
        if self.supplier_matcher is not None:
            matched = self.supplier_matcher.match(supplier_ref, po_base=base)
            if matched:
                supplier_name = matched.supplier_name
                supplier_id = matched.supplier_id

        return PurchaseOrder(
            id=base,
            supplier_id=supplier_id,
            supplier_ref=supplier_ref,
            supplier_name=supplier_name,
            seasonality=reader.text(row, "seasonality"),
            currency=self.default_currency,
            ex_factory_date=reader.text(row, "ex_factory_date"),
            total_cost_value=reader.number(row, "total_cost_value"),
            deposit_cost_value=reader.number(row, "deposit_cost_value"),
            deposit_payment_date=reader.text(row, "deposit_payment_date"),
            skus_created=reader.flag(row, "skus_created"),
            barcodes_sent=reader.flag(row, "barcodes_sent"),
            polybags_sent=reader.flag(row, "polybags_sent"),
            po_splits_confirmed=reader.flag(row, "po_splits_confirmed"),
            notes="Imported from spreadsheet",
        )

    def _build_shipment(self, parsed: ParsedReference, row: list, reader: RowReader) -> Shipment:
        # The suffix is authoritative; the DC column is only cross-checked
        dc_cell = _DESTINATION_CELLS.get(reader.text(row, "destination").upper())
        if dc_cell is not None and dc_cell != parsed.destination:
            logger.warning(
                "Row %s: DC column says %s but the reference says %s; using the reference",
                parsed.raw, dc_cell.value, parsed.destination.value,
            )

        return Shipment(
            po_id=parsed.base,
            shipment_ref=parsed.raw,
            destination=parsed.destination,
            mode=parsed.mode,
            status=reader.text(row, "status") or DEFAULT_SHIPMENT_STATUS,
            units=reader.integer(row, "units"),
            cartons=reader.integer(row, "cartons"),
            freight_forwarder=reader.text(row, "freight_forwarder"),
            shipment_date=reader.text(row, "shipment_date"),
            eta=reader.text(row, "eta"),
            delivery_date=reader.text(row, "delivery_date"),
            booked_in_date=reader.text(row, "booked_in_date"),
            tracking_number=reader.text(row, "tracking_number"),
            total_freight_cost=reader.number(row, "total_freight_cost"),
            unit_freight_cost_usd=reader.number(row, "unit_freight_cost_usd"),
            unit_freight_cost_gbp=reader.number(row, "unit_freight_cost_gbp"),
            import_tax_status=normalise_tax_status(reader.text(row, "import_tax_status")),
            added_to_warehouse=reader.flag(row, "added_to_warehouse"),
            delivery_booked=reader.flag(row, "delivery_booked"),
            quantities_verified=reader.flag(row, "quantities_verified"),
            stock_on_shopify=reader.flag(row, "stock_on_shopify"),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self, store, groups: list[ImportGroup], dry_run: bool = False) -> ImportReport:
        """
        Create every group's PO together with its shipments.

        A StoreError on one group (duplicate PO id, constraint failure) is
        recorded in the report and the remaining groups are still attempted.
        """
        report = ImportReport(rows_skipped=self.rows_skipped, dry_run=dry_run)
        report.rows_loaded = sum(len(g.references) for g in groups) + self.rows_skipped

        for group in groups:
            po = group.purchase_order
            if dry_run:
                report.created.append(po.id)
                report.shipments_created += len(group.shipments)
                continue
            try:
                store.create_purchase_order(po, [], group.shipments, actor="import")
            except StoreError as exc:
                report.skipped[po.id] = str(exc)
                logger.warning("Import skipped PO %s: %s", po.id, exc)
                continue
            report.created.append(po.id)
            report.shipments_created += len(group.shipments)

        logger.info(
            "Import complete: %d POs created, %d shipments, %d skipped%s",
            len(report.created), report.shipments_created, len(report.skipped),
            " (dry run)" if dry_run else "",
        )
        return report

    def import_rows(self, store, rows: list[list], dry_run: bool = False) -> ImportReport:
        return self.persist(store, self.reconcile(rows), dry_run=dry_run)

    def import_file(self, store, path: Path, dry_run: bool = False) -> ImportReport:
        return self.import_rows(store, read_table(path), dry_run=dry_run)


def normalise_tax_status(text: str) -> Optional[str]:
    """Map a free-text cell onto one of the three import tax policies."""
    if not text:
        return None
    lowered = text.strip().lower()
    for status in IMPORT_TAX_STATUSES:
        if lowered == status.lower():
            return status
    if lowered.startswith("ddp"):
        return "DDP - No taxes"
    if lowered.startswith("dap"):
        return "DAP - Buyer pays taxes"
    if "paid" in lowered:
        return "Taxes paid"
    logger.warning("Unrecognised import tax status %r ignored", text)
    return None
