"""
Pydantic models for dashboard API requests.
"""
from pydantic import BaseModel, Field
from typing import Optional

from models.purchase_order import (
    Destination, ImportTaxStatus, LineItem, ShipmentMode,
)
from models.result import SplitSelection
from models.supplier import SupplierStatus


class PurchaseOrderCreate(BaseModel):
    id: str = ""                    # empty -> PO-<year>-<seq>
    supplier_id: Optional[int] = None
    supplier_name: str = Field(min_length=1)
    supplier_ref: str = ""
    seasonality: Optional[str] = None   # None -> configured default season
    currency: Optional[str] = None      # None -> configured default currency
    ex_factory_date: str = ""
    total_cost_value: float = 0.0
    deposit_cost_value: float = 0.0
    deposit_payment_date: str = ""
    notes: str = ""
    lines: list[LineItem] = Field(default_factory=list)
    # Shipments to create straight away
    uk_shipment: bool = False
    usa_shipment: bool = False
    mode: ShipmentMode = ShipmentMode.SEA


class PurchaseOrderUpdate(BaseModel):
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = Field(default=None, min_length=1)
    supplier_ref: Optional[str] = None
    seasonality: Optional[str] = None
    currency: Optional[str] = None
    ex_factory_date: Optional[str] = None
    total_cost_value: Optional[float] = None
    deposit_cost_value: Optional[float] = None
    deposit_payment_date: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    skus_created: Optional[bool] = None
    barcodes_sent: Optional[bool] = None
    polybags_sent: Optional[bool] = None
    po_splits_confirmed: Optional[bool] = None


class ShipmentUpdate(BaseModel):
    status: Optional[str] = None    # any status, in any order
    units: Optional[int] = Field(default=None, ge=0)
    cartons: Optional[int] = Field(default=None, ge=0)
    freight_forwarder: Optional[str] = None
    shipment_date: Optional[str] = None
    eta: Optional[str] = None
    delivery_date: Optional[str] = None
    booked_in_date: Optional[str] = None
    tracking_number: Optional[str] = None
    total_freight_cost: Optional[float] = None
    unit_freight_cost_usd: Optional[float] = None
    unit_freight_cost_gbp: Optional[float] = None
    import_tax_status: Optional[ImportTaxStatus] = None
    added_to_warehouse: Optional[bool] = None
    delivery_booked: Optional[bool] = None
    quantities_verified: Optional[bool] = None
    stock_on_shopify: Optional[bool] = None


class SplitRequest(BaseModel):
    selections: list[SplitSelection]


class AddShipmentRequest(BaseModel):
    destination: Destination
    mode: ShipmentMode = ShipmentMode.SEA


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = ""
    status: SupplierStatus = "Active"
    contact: str = ""
    phone: str = ""
    address: str = ""
    product_types: str = ""
    payment_terms: str = ""
    lead_time_days: str = ""
    transit_time: str = ""
    country_of_origin: str = ""
    nearest_port: str = ""
    currency: str = "USD"
    notes: str = ""


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    code: Optional[str] = None
    status: Optional[SupplierStatus] = None
    contact: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    product_types: Optional[str] = None
    payment_terms: Optional[str] = None
    lead_time_days: Optional[str] = None
    transit_time: Optional[str] = None
    country_of_origin: Optional[str] = None
    nearest_port: Optional[str] = None
    currency: Optional[str] = None
    notes: Optional[str] = None


class ProductSizesUpdate(BaseModel):
    sizes: dict[str, int]
