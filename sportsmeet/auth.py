"""
Authentication utilities for JWT tokens and password hashing.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .errors import InvalidTokenError
from .logging_config import get_logger
from .models.user import User
from .config import get_settings

settings = get_settings()
logger = get_logger("auth")

# Salted, iterated key derivation
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unknown or corrupt hash format
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    to_encode = data.copy()
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])  # JWT sub claim must be a string
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(days=settings.access_token_expire_days)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_user_token(user: User) -> str:
    """Issue an access token for a user."""
    return create_access_token({"sub": user.id, "username": user.username})


def verify_token(token: str) -> dict:
    """Verify a JWT token and return its claims.

    Raises:
        InvalidTokenError: If the token is malformed, expired, wrongly signed,
            not an access token or carries no usable subject.
    """
    if not token:
        raise InvalidTokenError("Token is empty")
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    if payload.get("type", "access") != "access":
        raise InvalidTokenError("Wrong token type")

    try:
        payload["user_id"] = int(payload.get("sub"))
    except (ValueError, TypeError) as e:
        raise InvalidTokenError("Token has no valid subject") from e
    return payload


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_required_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user, raising 401 otherwise."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Authentication token required")

    try:
        claims = verify_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.info("Rejected bearer token", reason=str(e))
        raise _unauthorized("Invalid or expired token")

    user = db.query(User).filter(User.id == claims["user_id"]).first()
    if not user or not user.is_active:
        raise _unauthorized("User not found or deactivated")
    return user
