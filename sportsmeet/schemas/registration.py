from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from .auth import UserPublic


class RegistrationCreate(BaseModel):
    activity_id: int
    notes: Optional[str] = None


class RegistrationResponse(BaseModel):
    id: int
    user_id: int
    activity_id: int
    order_id: Optional[int] = None
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttendeeResponse(RegistrationResponse):
    user: Optional[UserPublic] = None
