from .auth import UserCreate, UserLogin, UserUpdate, UserResponse, UserPublic
from .activity import ActivityCreate, ActivityUpdate, ActivitySearch, ActivityResponse
from .registration import RegistrationCreate, RegistrationResponse, AttendeeResponse
from .order import OrderCreate, OrderResponse, OrderStats
from .comment import CommentCreate, CommentResponse, RatingStats

__all__ = [
    "UserCreate", "UserLogin", "UserUpdate", "UserResponse", "UserPublic",
    "ActivityCreate", "ActivityUpdate", "ActivitySearch", "ActivityResponse",
    "RegistrationCreate", "RegistrationResponse", "AttendeeResponse",
    "OrderCreate", "OrderResponse", "OrderStats",
    "CommentCreate", "CommentResponse", "RatingStats",
]
