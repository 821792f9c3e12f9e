from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime


class CommentCreate(BaseModel):
    activity_id: int
    content: str = Field(min_length=1)
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class CommentResponse(BaseModel):
    id: int
    user_id: int
    activity_id: int
    content: str
    rating: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RatingStats(BaseModel):
    average_rating: float
    total_comments: int
    rating_distribution: Dict[int, int]
