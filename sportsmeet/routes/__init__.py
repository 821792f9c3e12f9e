from .users import router as users_router
from .activities import router as activities_router
from .registrations import router as registrations_router
from .orders import router as orders_router
from .comments import router as comments_router

__all__ = [
    "users_router",
    "activities_router",
    "registrations_router",
    "orders_router",
    "comments_router",
]
