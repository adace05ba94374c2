from pydantic import BaseModel
from typing import Literal, Optional, List


SupplierStatus = Literal["Active", "Inactive"]


class Supplier(BaseModel):
    """
    A factory or agent the brand buys from.
    code is the short abbreviation used as the prefix of PO references (e.g. GWG).
    """
    id: Optional[int] = None
    name: str
    code: str = ""
    status: SupplierStatus = "Active"
    contact: str = ""
    phone: str = ""
    address: str = ""
    product_types: str = ""
    payment_terms: str = ""
    lead_time_days: str = ""        # free text, e.g. "45 days"
    transit_time: str = ""
    country_of_origin: str = ""
    nearest_port: str = ""
    currency: str = "USD"
    notes: str = ""
    created_at: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == "Active"

    @property
    def all_names(self) -> List[str]:
        """Return the name plus the short code for matching."""
        return [self.name] + ([self.code] if self.code else [])
