"""
Column resolution for spreadsheet imports.

An import file's header text and column order are not fixed. Each field the
reconciler needs is located by a ColumnResolver:

  RegexColumnResolver     case-insensitive patterns tested against each
                          header (default, mirrors the PO management sheet)
  ExplicitColumnResolver  operator-supplied {field: header} mapping

A field that resolves to no column reads as its default (0 / "" / False).
Missing columns are never an error.
"""
import logging
import re
from datetime import date, datetime
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

# field -> patterns tried in order; first header matching the earliest pattern wins
DEFAULT_PATTERNS: dict[str, tuple[str, ...]] = {
    # Reference / grouping
    "reference":             (r"^po\s*#", r"^po.?(no|num|ref)", r"shipment.?ref", r"^ref"),
    "destination":           (r"^dc$", r"destination"),
    # PO scalar fields
    "supplier_ref":          (r"supplier.?ref", r"^supplier$"),
    "seasonality":           (r"season",),
    "total_cost_value":      (r"total.?cost",),
    "deposit_cost_value":    (r"deposit.?cost",),
    "deposit_payment_date":  (r"deposit.?pay",),
    "ex_factory_date":       (r"ex.?factory",),
    "skus_created":          (r"skus?.?created",),
    "barcodes_sent":         (r"barcode",),
    "polybags_sent":         (r"polybag",),
    "po_splits_confirmed":   (r"splits?.?confirmed",),
    # Shipment fields
    "status":                (r"^(po|shipment)?\s*status$",),
    "units":                 (r"^units$",),
    "cartons":               (r"carton",),
    "freight_forwarder":     (r"freight.?forward",),
    "shipment_date":         (r"shipment.?date",),
    "eta":                   (r"^eta$",),
    "total_freight_cost":    (r"total.?freight",),
    "unit_freight_cost_usd": (r"usd",),
    "unit_freight_cost_gbp": (r"gbp.?new", r"gbp"),
    "import_tax_status":     (r"import.?tax",),
    "tracking_number":       (r"tracking",),
    "delivery_date":         (r"delivery.?date",),
    "booked_in_date":        (r"booked.?in",),
    "added_to_warehouse":    (r"added.?to.?warehouse",),
    "delivery_booked":       (r"delivery.?booked",),
    "quantities_verified":   (r"quantit(y|ies).?verified",),
    "stock_on_shopify":      (r"shopify",),
}

_TRUE_TEXT = "TRUE"


class ColumnResolver(Protocol):
    """Strategy mapping import fields to column indexes."""

    def resolve(self, headers: list[str]) -> dict[str, Optional[int]]:
        ...


class RegexColumnResolver:
    """Locate each field by testing the headers against case-insensitive patterns."""

    def __init__(self, patterns: Optional[dict[str, tuple[str, ...]]] = None):
        self.patterns = {
            field: [re.compile(p, re.IGNORECASE) for p in pats]
            for field, pats in (patterns or DEFAULT_PATTERNS).items()
        }

    def resolve(self, headers: list[str]) -> dict[str, Optional[int]]:
        headers = [str(h or "").strip() for h in headers]
        resolved: dict[str, Optional[int]] = {}
        for field, regexes in self.patterns.items():
            resolved[field] = None
            for rx in regexes:
                idx = next((i for i, h in enumerate(headers) if rx.search(h)), None)
                if idx is not None:
                    resolved[field] = idx
                    break
        missing = [f for f, idx in resolved.items() if idx is None]
        if missing:
            logger.debug("Import columns not found (defaults apply): %s", ", ".join(missing))
        return resolved


class ExplicitColumnResolver:
    """Use an operator-chosen {field: header text} mapping; unknown headers are skipped."""

    def __init__(self, mapping: dict[str, str]):
        self.mapping = mapping

    def resolve(self, headers: list[str]) -> dict[str, Optional[int]]:
        lookup = {str(h or "").strip().lower(): i for i, h in enumerate(headers)}
        return {
            field: lookup.get((header or "").strip().lower())
            for field, header in self.mapping.items()
        }


class RowReader:
    """Typed, default-on-missing access to the cells of one data row."""

    def __init__(self, columns: dict[str, Optional[int]]):
        self.columns = columns

    def raw(self, row: list, field: str):
        idx = self.columns.get(field)
        if idx is None or idx >= len(row):
            return None
        return row[idx]

    def text(self, row: list, field: str) -> str:
        return cell_text(self.raw(row, field))

    def number(self, row: list, field: str) -> float:
        return to_float(self.raw(row, field)) or 0.0

    def integer(self, row: list, field: str) -> int:
        return int(to_float(self.raw(row, field)) or 0)

    def flag(self, row: list, field: str) -> bool:
        return cell_text(self.raw(row, field)).upper() == _TRUE_TEXT


# ------------------------------------------------------------------
# Cell helpers
# ------------------------------------------------------------------

def cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_float(value) -> Optional[float]:
    """Parse a numeric cell, ignoring currency symbols, commas and spaces."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not value or not str(value).strip():
        return None
    cleaned = re.sub(r"[^\d.\-]", "", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return None
