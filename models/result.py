from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from .purchase_order import Destination, PurchaseOrder, Shipment, ShipmentMode


class ParsedReference(BaseModel):
    """Decomposition of a raw shipment / PO reference such as GWG048UKSEA."""
    raw: str
    base: str
    destination: Optional[Destination] = None   # None when no destination suffix
    mode: ShipmentMode = ShipmentMode.SEA
    has_suffix: bool = False


class SplitSelection(BaseModel):
    """One destination to include in a split. units=None means pre-fill from lines."""
    destination: Destination
    mode: ShipmentMode = ShipmentMode.SEA
    units: Optional[int] = Field(default=None, ge=0)


class SplitPlan(BaseModel):
    """Result of planning a split: the PO as it will be, plus the new shipments."""
    purchase_order: PurchaseOrder
    shipments: List[Shipment] = Field(default_factory=list)


class ImportGroup(BaseModel):
    """All rows of an import file that share one base PO id."""
    purchase_order: PurchaseOrder
    shipments: List[Shipment] = Field(default_factory=list)
    references: List[ParsedReference] = Field(default_factory=list)


class ImportReport(BaseModel):
    """Outcome of persisting an import batch."""
    rows_loaded: int = 0
    rows_skipped: int = 0                   # blank reference cell
    created: List[str] = Field(default_factory=list)
    shipments_created: int = 0
    skipped: dict[str, str] = Field(default_factory=dict)   # po id -> reason
    dry_run: bool = False


SeverityLevel = Literal["error", "warning", "info"]


class Discrepancy(BaseModel):
    """A single detected discrepancy on a Purchase Order."""
    type: str                               # e.g. "units_diverged"
    severity: SeverityLevel                 # error / warning / info
    description: str                        # Human-readable explanation
    field: Optional[str] = None             # Which field is affected
    destination: Optional[Destination] = None
    ordered_value: Optional[str] = None     # What the line items say
    actual_value: Optional[str] = None      # What the shipments / flags say


class MatchedSupplier(BaseModel):
    """The supplier from the master list matched against an import row."""
    supplier_id: Optional[int] = None
    supplier_name: str
    match_method: str                       # code_exact / name_exact / name_fuzzy
    confidence: float                       # 0-1
