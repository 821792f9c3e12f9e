from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime
from decimal import Decimal


class ActivityCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str
    location: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1, max_length=100)
    start_time: datetime
    end_time: datetime
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    max_participants: int = Field(ge=1)
    image_url: Optional[str] = Field(default=None, max_length=500)
    requirements: Optional[str] = None


class ActivityUpdate(BaseModel):
    """Partial update; only fields actually sent are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    max_participants: Optional[int] = Field(default=None, ge=1)
    image_url: Optional[str] = Field(default=None, max_length=500)
    requirements: Optional[str] = None
    status: Optional[Literal["active", "cancelled", "completed"]] = None


class ActivitySearch(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: int = 1
    limit: int = 10


class ActivityResponse(BaseModel):
    id: int
    title: str
    description: str
    location: str
    category: str
    requirements: Optional[str] = None
    image_url: Optional[str] = None
    start_time: datetime
    end_time: datetime
    price: float
    max_participants: int
    current_participants: int
    status: str
    creator_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
