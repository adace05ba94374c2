from pydantic import BaseModel, Field
from typing import Dict, Optional


class Product(BaseModel):
    """An inventory snapshot row: one SKU in one warehouse, stock held per size."""
    id: str                                 # SKU
    name: str
    category: str = ""
    warehouse: str = ""                     # e.g. "UK - London"
    sizes: Dict[str, int] = Field(default_factory=dict)
    cost: Optional[float] = None
    currency: str = "GBP"
