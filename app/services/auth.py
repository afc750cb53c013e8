"""Authentication service: user accounts and JWT access tokens."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.user import User

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 24


class EmailAlreadyRegisteredError(ValueError):
    """Raised when signing up with an email that already has an account."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(db: Session, email: str, password: str, name: str | None = None) -> User:
    """Create a new user with a bcrypt-hashed password."""
    if get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegisteredError(f"{email} is already registered")
    user = User(email=normalize_email(email), name=name)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Validate credentials and return the user, or None if invalid."""
    user = get_user_by_email(db, email)
    if user is None or not user.verify_password(password):
        return None
    return user


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT token. Returns payload or None."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None


def get_user_from_token(db: Session, token: str) -> Optional[User]:
    """Resolve the token's subject (user id) to a User, or None."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None
    return db.get(User, user_id)
