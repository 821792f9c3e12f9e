from .activity_service import ActivityService
from .registration_service import RegistrationService
from .order_service import OrderService
from .comment_service import CommentService
from .user_service import UserService

__all__ = [
    "ActivityService",
    "RegistrationService",
    "OrderService",
    "CommentService",
    "UserService",
]
