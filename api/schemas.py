"""
Request bodies.

Unknown keys are refused (extra="forbid") so clients cannot smuggle fields
into the store; the services validate again for callers that bypass HTTP.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.config import MAX_ITEM_PRICE, MAX_QUANTITY


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# Users
class RegisterBody(StrictModel):
    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr
    password: str = Field(..., min_length=6)


# Menu items
class MenuItemCreate(StrictModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, le=MAX_ITEM_PRICE, allow_inf_nan=False)
    category: str = Field(..., min_length=1, description="Free-text label like Pizza, Drinks")
    image: Optional[str] = Field(None, description="Image path or URL")
    available: bool = True


class MenuItemUpdate(StrictModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0, le=MAX_ITEM_PRICE, allow_inf_nan=False)
    category: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    available: Optional[bool] = None


# Cart
class CartAddBody(StrictModel):
    menu_item_id: int
    quantity: int = Field(1, ge=1, le=MAX_QUANTITY)


class CartUpdateBody(StrictModel):
    menu_item_id: int
    # Range is checked by the cart service so the error reads the same everywhere
    quantity: int


class CartLineBody(StrictModel):
    menu_item_id: int


# Orders
class OrderLineRequest(StrictModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)


class OrderCreateBody(StrictModel):
    items: List[OrderLineRequest]


class OrderStatusBody(StrictModel):
    status: str = Field(..., description="pending/processing/completed/cancelled")
