"""
Order model: payment lifecycle wrapped around a registration.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, text

from ..clock import utcnow
from ..database import Base


class OrderStatus:
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    ALL = (PENDING, PAID, CANCELLED, REFUNDED)


class PaymentStatus:
    PENDING = "pending"
    SUCCESS = "success"
    REFUNDED = "refunded"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False, index=True)
    activity_title = Column(String(200), nullable=False)  # snapshot at creation
    amount = Column(Numeric(10, 2), nullable=False)  # snapshot of activity price
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING)
    notes = Column(Text, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        # One pending order per user per activity
        Index(
            "uq_orders_pending_user_activity",
            "user_id",
            "activity_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Order(number={self.order_number}, user={self.user_id}, status={self.status})>"
