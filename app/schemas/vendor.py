from typing import List, Literal, Optional
from pydantic import BaseModel, Field, constr


class AddProductRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=150)
    price: float = Field(gt=0)
    brand: Optional[str] = None
    description: Optional[str] = ""
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    quantity: int = Field(default=0, ge=0)
    image_url: Optional[str] = None


class UpgradeRequest(BaseModel):
    tier: Literal["basic", "professional", "premium"]
    billing_cycle: Literal["monthly", "yearly"] = "monthly"


class VerifyPaymentRequest(BaseModel):
    orderId: constr(min_length=1)
    paymentId: constr(min_length=1)
    signature: constr(min_length=1)


class OrderStatusRequest(BaseModel):
    status: Literal["confirmed", "preparing", "out_for_delivery", "delivered", "cancelled"]


class RollupRequest(BaseModel):
    vendorId: Optional[int] = None
    date: Optional[str] = None
