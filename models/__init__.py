from .purchase_order import (
    PurchaseOrder, LineItem, Shipment, Destination, ShipmentMode, SplitState,
    SIZES, SHIPMENT_STATUSES, DEFAULT_SHIPMENT_STATUS, IMPORT_TAX_STATUSES,
    FREIGHT_FORWARDERS,
)
from .supplier import Supplier
from .inventory import Product
from .result import (
    ParsedReference, SplitSelection, SplitPlan, ImportGroup, ImportReport,
    Discrepancy, MatchedSupplier,
)

__all__ = [
    "PurchaseOrder", "LineItem", "Shipment", "Destination", "ShipmentMode", "SplitState",
    "SIZES", "SHIPMENT_STATUSES", "DEFAULT_SHIPMENT_STATUS", "IMPORT_TAX_STATUSES",
    "FREIGHT_FORWARDERS",
    "Supplier",
    "Product",
    "ParsedReference", "SplitSelection", "SplitPlan", "ImportGroup", "ImportReport",
    "Discrepancy", "MatchedSupplier",
]
