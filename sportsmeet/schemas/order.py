from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class OrderCreate(BaseModel):
    activity_id: int
    notes: Optional[str] = None


class OrderResponse(BaseModel):
    id: int
    order_number: str
    user_id: int
    activity_id: int
    activity_title: str
    amount: float
    status: str
    payment_status: str
    notes: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderStats(BaseModel):
    total_orders: int = 0
    pending_orders: int = 0
    paid_orders: int = 0
    cancelled_orders: int = 0
    refunded_orders: int = 0
    total_amount: float = 0.0
