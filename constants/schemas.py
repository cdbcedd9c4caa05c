from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


# A raw spreadsheet row keyed by column header
RawRecord = Dict[str, str]

ConditionLevel = Literal["bahaya", "low", "-"]


# --- Data Models Based on the Processing and Supplier sheets ---


class CurrentStockItem(BaseModel):
    """One row of the processing table with its recomputed restock condition"""

    item: str = Field(alias="Item")
    unit: str = Field(alias="Unit", default="")
    vendor: str = Field(alias="Vendor", default="")
    category: str = Field(alias="Category", default="")
    par_qty: float = Field(alias="Par Qty", default=0, ge=0)
    min_restock: float = Field(alias="Min Restock", default=0, ge=0)
    current_qty: float = Field(alias="Current Qty", default=0, ge=0)
    condition: ConditionLevel = Field(alias="Condition", default="-")

    class Config:
        populate_by_name = True


class SupplierContact(BaseModel):
    """Supplier contact entry, matched to an item's vendor by exact name"""

    name: str = Field(alias="Name")
    media: str = Field(alias="Media", default="")
    phone: Optional[str] = Field(alias="Phone", default=None)  # digits only, country code, no '+'
    alias: Optional[str] = Field(alias="Alias", default=None)  # greeting name

    class Config:
        populate_by_name = True


class LatestMeta(BaseModel):
    """Timestamp and staff name of the most recent form submission"""

    timestamp: str  # DD/MM/YYYY HH:mm:ss
    staff: str = ""


class ItemRow(BaseModel):
    """Before/after observation of one item for a single day"""

    item_name: str
    before: str = "-"
    after: str = "-"


class VendorMessage(BaseModel):
    """Restock request addressed to a single vendor"""

    vendor: str
    items: List[CurrentStockItem] = Field(default_factory=list)
    message: str = ""
