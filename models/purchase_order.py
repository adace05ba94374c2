from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


SIZES = ["XS", "S", "M", "L", "XL", "XXL"]
Size = Literal["XS", "S", "M", "L", "XL", "XXL"]

# Shipment lifecycle, in the order a shipment normally moves through it.
# Status is free choice: nothing enforces this ordering.
SHIPMENT_STATUSES = [
    "In production",
    "In transit - awaiting freight info",
    "Receipt in progress",
    "Delivered",
    "Booked in & checked",
    "Delivered + booked in",
]
DEFAULT_SHIPMENT_STATUS = SHIPMENT_STATUSES[0]

IMPORT_TAX_STATUSES = ["DDP - No taxes", "Taxes paid", "DAP - Buyer pays taxes"]
ImportTaxStatus = Literal["DDP - No taxes", "Taxes paid", "DAP - Buyer pays taxes"]

FREIGHT_FORWARDERS = [
    "HuianExpress", "JET", "KTL", "ACS logistics", "ICL Logistics",
    "Evergreen logistics", "Vina Happy Shipping", "Turkmen logistics", "Supplier",
]

CHECKLIST_FIELDS = ["added_to_warehouse", "delivery_booked", "quantities_verified", "stock_on_shopify"]
READINESS_FIELDS = ["skus_created", "barcodes_sent", "polybags_sent"]


class Destination(str, Enum):
    """Distribution centre a shipment is bound for."""
    UK = "UK"
    US = "US"

    @property
    def ref_code(self) -> str:
        """Marker used inside shipment references (US is written USA)."""
        return "USA" if self is Destination.US else "UK"


class ShipmentMode(str, Enum):
    SEA = "SEA"
    AIR = "AIR"
    TRUCK = "TRUCK"


class SplitState(str, Enum):
    UNSPLIT = "Unsplit"
    SPLIT = "Split"


def _none_to_zero(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0
    return value


class LineItem(BaseModel):
    """A single garment line on a Purchase Order. Immutable once created."""
    id: Optional[int] = None
    product_name: str = ""
    size: Size = "M"
    cost_price: float = 0.0
    design_ref: str = ""
    colour_code: str = ""
    sku: str = ""
    qty_uk: int = 0
    qty_usa: int = 0
    confirmed_xf: int = 0           # quantity confirmed at ex-factory

    @field_validator(
        "cost_price", "qty_uk", "qty_usa", "confirmed_xf", mode="before"
    )
    @classmethod
    def blank_as_zero(cls, value):
        return _none_to_zero(value)


class Shipment(BaseModel):
    """
    One destination leg of a Purchase Order.

    shipment_ref is always base PO id + destination marker + mode marker,
    e.g. GWG048UKSEA or GWG048USAAIR.
    """
    id: Optional[int] = None
    po_id: Optional[str] = None
    shipment_ref: str
    destination: Destination
    mode: ShipmentMode = ShipmentMode.SEA
    status: str = DEFAULT_SHIPMENT_STATUS
    units: int = 0
    cartons: int = 0
    freight_forwarder: str = ""
    shipment_date: str = ""         # free text, e.g. "7-Jan-2025"
    eta: str = ""
    delivery_date: str = ""
    booked_in_date: str = ""
    tracking_number: str = ""       # tracking # / AWB
    total_freight_cost: float = 0.0
    unit_freight_cost_usd: float = 0.0
    unit_freight_cost_gbp: float = 0.0
    import_tax_status: Optional[ImportTaxStatus] = None

    # Receiving checklist
    added_to_warehouse: bool = False
    delivery_booked: bool = False
    quantities_verified: bool = False
    stock_on_shopify: bool = False

    @field_validator(
        "units", "cartons", "total_freight_cost",
        "unit_freight_cost_usd", "unit_freight_cost_gbp", mode="before"
    )
    @classmethod
    def blank_as_zero(cls, value):
        return _none_to_zero(value)


class PurchaseOrder(BaseModel):
    """
    A Purchase Order with its line items and shipments.

    id is either a generated PO-<year>-<seq> or the base reference entered by
    the operator (e.g. GWG049).
    """
    id: str = ""
    supplier_id: Optional[int] = None
    supplier_ref: str = ""
    supplier_name: str = ""
    seasonality: str = ""           # e.g. "AW25"
    currency: str = "USD"
    ex_factory_date: str = ""
    total_cost_value: float = 0.0
    deposit_cost_value: float = 0.0
    deposit_payment_date: str = ""
    status: Optional[str] = None
    notes: str = ""
    created_at: Optional[str] = None

    # Document readiness
    skus_created: bool = False
    barcodes_sent: bool = False
    polybags_sent: bool = False
    po_splits_confirmed: bool = False

    lines: List[LineItem] = Field(default_factory=list)
    shipments: List[Shipment] = Field(default_factory=list)

    @field_validator(
        "total_cost_value", "deposit_cost_value", mode="before"
    )
    @classmethod
    def blank_as_zero(cls, value):
        return _none_to_zero(value)

    @property
    def split_state(self) -> SplitState:
        """The one place that decides whether a PO still awaits its split."""
        if not self.shipments and not self.po_splits_confirmed:
            return SplitState.UNSPLIT
        return SplitState.SPLIT

    def shipment_for(self, destination: Destination) -> Optional[Shipment]:
        for shipment in self.shipments:
            if shipment.destination == destination:
                return shipment
        return None
