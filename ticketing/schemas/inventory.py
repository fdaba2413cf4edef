from typing import Dict, Optional
from pydantic import BaseModel, Field, UUID4


# Inventory: Provision one slot/SKU pair (POST /admin/inventory)
class InventoryCreate(BaseModel):
    time_slot_id: UUID4
    sku_id: UUID4
    total_quantity: int = Field(ge=0)


# Inventory: Provision every slot of an event (POST /admin/inventory/provision)
class InventoryProvisionAll(BaseModel):
    event_id: UUID4
    totals: Dict[UUID4, int]  # sku_id -> total per time slot


class InventoryProvisionResult(BaseModel):
    created: int


# Inventory: Admin total edit (PATCH /admin/inventory/{id})
class InventoryUpdate(BaseModel):
    total_quantity: int = Field(ge=0)
    mode: Optional[str] = Field(None, pattern="^(reset|preserve_sold)$")


class InventoryRecord(BaseModel):
    id: UUID4
    time_slot_id: UUID4
    sku_id: UUID4
    total_quantity: int
    available_quantity: int
    sold_quantity: int

    class Config:
        from_attributes = True
