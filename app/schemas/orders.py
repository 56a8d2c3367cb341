from typing import List, Optional
from pydantic import BaseModel, Field


class OrderLine(BaseModel):
    productId: int
    quantity: int = Field(gt=0, le=100)


class PlaceOrderRequest(BaseModel):
    vendorId: int
    items: List[OrderLine] = Field(min_length=1)
    deliveryNotes: Optional[str] = None


class StartChatRequest(BaseModel):
    participantId: int


class ChatMessageRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    receiverId: Optional[int] = None
    type: str = "text"
