"""
Activity model: a scheduled, capacity-bounded event owned by its creator.
"""
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)

from ..clock import utcnow
from ..database import Base


class ActivityStatus:
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    ALL = (ACTIVE, CANCELLED, COMPLETED)


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    requirements = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    max_participants = Column(Integer, nullable=False)
    current_participants = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=ActivityStatus.ACTIVE)
    is_active = Column(Boolean, nullable=False, default=True)  # False once soft-deleted
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("max_participants >= 1", name="ck_activities_max_positive"),
        CheckConstraint("current_participants >= 0", name="ck_activities_current_non_negative"),
        CheckConstraint(
            "current_participants <= max_participants", name="ck_activities_current_lte_max"
        ),
        CheckConstraint("price >= 0", name="ck_activities_price_non_negative"),
        Index("ix_activities_active_created", "is_active", "created_at"),
    )

    def has_started(self, now) -> bool:
        return now >= self.start_time

    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants

    def __repr__(self) -> str:
        return (
            f"<Activity(id={self.id}, title={self.title}, "
            f"participants={self.current_participants}/{self.max_participants})>"
        )
