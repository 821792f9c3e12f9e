from .user import User
from .activity import Activity, ActivityStatus
from .registration import Registration, RegistrationStatus
from .order import Order, OrderStatus, PaymentStatus
from .comment import Comment

__all__ = [
    "User",
    "Activity",
    "ActivityStatus",
    "Registration",
    "RegistrationStatus",
    "Order",
    "OrderStatus",
    "PaymentStatus",
    "Comment",
]
