"""
Registration model: a user's attendance intent for an activity.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship

from ..clock import utcnow
from ..database import Base


class RegistrationStatus:
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)  # set when created by paying an order
    status = Column(String(20), nullable=False, default=RegistrationStatus.CONFIRMED)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Lookup only; registrations are not owned by users
    user = relationship("User", viewonly=True)

    __table_args__ = (
        # One confirmed registration per user per activity; cancelled rows don't count
        Index(
            "uq_registrations_confirmed_user_activity",
            "user_id",
            "activity_id",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id}, user={self.user_id}, "
            f"activity={self.activity_id}, status={self.status})>"
        )
