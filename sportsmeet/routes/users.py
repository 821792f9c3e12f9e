"""
Account routes: register, login and profile management.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth import create_user_token, get_required_user
from ..config import get_settings
from ..database import get_db
from ..limiter import limiter
from ..models.user import User
from ..responses import failure, success
from ..schemas.auth import UserCreate, UserLogin, UserPublic, UserResponse, UserUpdate
from ..services.user_service import UserService

settings = get_settings()

router = APIRouter(prefix="/api/users", tags=["users"])


def user_to_dict(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


@router.post("/register")
@limiter.limit(settings.register_rate_limit)
def register(request: Request, user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user account."""
    user = UserService(db).register(user_data)
    return success(user_to_dict(user), "Registration successful")


@router.post("/login")
@limiter.limit(settings.login_rate_limit)
def login(request: Request, credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with username/password; returns the profile and a bearer token."""
    user = UserService(db).authenticate(credentials.username, credentials.password)
    if not user:
        return failure("Invalid username or password")

    data = user_to_dict(user)
    data["token"] = create_user_token(user)
    data["token_type"] = "bearer"
    return success(data, "Login successful")


@router.get("/profile")
def get_profile(current_user: User = Depends(get_required_user)):
    """Get current authenticated user."""
    return success(user_to_dict(current_user))


@router.delete("/profile")
def deactivate_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Deactivate the current account. Issued tokens stop working."""
    UserService(db).deactivate(current_user.id)
    return success(message="Account deactivated")


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Public profile of an active user."""
    user = UserService(db).get(user_id)
    return success(UserPublic.model_validate(user).model_dump(mode="json"))


@router.put("/{user_id}")
def update_user(
    user_id: int,
    update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Update one's own profile."""
    user = UserService(db).update(user_id, update, current_user.id)
    return success(user_to_dict(user), "Profile updated")
