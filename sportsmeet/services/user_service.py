"""
Account directory: registration, login check and profile maintenance.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import get_password_hash, verify_password
from ..errors import DuplicateError, ForbiddenError, NotFoundError
from ..models.user import User
from ..schemas.auth import UserCreate, UserUpdate
from .base import BaseService

# Optional profile fields an explicit null clears; email is required
CLEARABLE_PROFILE_FIELDS = frozenset({"phone", "real_name"})


class UserService(BaseService):
    """Service for account operations."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)

    def register(self, data: UserCreate) -> User:
        """Create an account.

        Raises:
            DuplicateError: Username or email already taken.
        """
        if self.db.query(User).filter(User.username == data.username).first():
            raise DuplicateError("Username already exists")
        if self.db.query(User).filter(User.email == data.email).first():
            raise DuplicateError("Email already registered")

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            phone=data.phone,
            real_name=data.real_name,
        )
        try:
            with self.unit_of_work():
                self.db.add(user)
        except IntegrityError:
            raise DuplicateError("Username or email already registered")

        self.db.refresh(user)
        self.log.info("User registered", user_id=user.id)
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, or None."""
        user = (
            self.db.query(User)
            .filter(User.username == username, User.is_active.is_(True))
            .first()
        )
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

    def get(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
        if not user:
            raise NotFoundError("User")
        return user

    def update(self, user_id: int, patch: UserUpdate, requester_id: int) -> User:
        """Update one's own profile fields.

        Raises:
            ForbiddenError: Requester is someone else.
            NotFoundError: User absent or deactivated.
            DuplicateError: New email belongs to another user.
        """
        if user_id != requester_id:
            raise ForbiddenError("You can only update your own profile")
        user = self.get(user_id)

        changes = {
            k: v
            for k, v in patch.model_dump(exclude_unset=True).items()
            if v is not None or k in CLEARABLE_PROFILE_FIELDS
        }
        if "email" in changes and changes["email"] != user.email:
            taken = (
                self.db.query(User)
                .filter(User.email == changes["email"], User.id != user_id)
                .first()
            )
            if taken:
                raise DuplicateError("Email already registered")

        try:
            with self.unit_of_work():
                for key, value in changes.items():
                    setattr(user, key, value)
        except IntegrityError:
            raise DuplicateError("Email already registered")

        self.db.refresh(user)
        return user

    def deactivate(self, user_id: int) -> None:
        """Soft-deactivate an account; its tokens stop working."""
        user = self.get(user_id)
        with self.unit_of_work():
            user.is_active = False
        self.log.info("User deactivated", user_id=user_id)
