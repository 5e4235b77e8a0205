"""Authentication service helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from secrets import compare_digest, token_urlsafe
from typing import Optional, Tuple

import jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from tenderdesk.app.auth import models, schemas
from tenderdesk.app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthenticationError(Exception):
    """Raised when authentication or token verification fails."""


class UserAlreadyExistsError(Exception):
    """Raised when trying to create a user with an existing email address."""


class PasswordPolicyError(Exception):
    """Raised when a password does not meet backend hashing requirements."""


class PasswordResetError(Exception):
    """Raised when generating or consuming password reset tokens fails."""


def hash_password(password: str) -> str:
    try:
        return pwd_context.hash(password)
    except ValueError as exc:  # passlib raises ValueError for unsupported passwords
        raise PasswordPolicyError("Password does not meet the security requirements") from exc


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    stmt = select(models.User).where(models.User.email == email.strip().lower())
    return db.execute(stmt).scalar_one_or_none()


def get_user_by_id(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)


def create_user(db: Session, user_in: schemas.UserCreate) -> models.User:
    if not settings.allow_open_registration:
        raise AuthenticationError("Sign-up is currently disabled")

    if get_user_by_email(db, user_in.email):
        raise UserAlreadyExistsError("An account with this email already exists")

    user = models.User(
        email=user_in.email,
        full_name=user_in.full_name,
        password_hash=hash_password(user_in.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> models.User:
    user = get_user_by_email(db, email)
    if not user:
        logger.warning("Login attempt for unknown account")
        raise AuthenticationError("Invalid email or password")

    if not verify_password(password, user.password_hash):
        logger.warning(f"Password verification failed for user {user.id}")
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("This account has been disabled")
    return user


def create_access_token(*, subject: int, expires_minutes: Optional[int] = None) -> tuple[str, int]:
    expire_minutes = expires_minutes or settings.jwt_access_token_expires_minutes
    expire_delta = timedelta(minutes=expire_minutes)
    expire_time = datetime.now(tz=timezone.utc) + expire_delta
    payload = {"sub": str(subject), "exp": expire_time}
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, int(expire_delta.total_seconds())


def verify_token(token: str) -> schemas.TokenPayload:
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise AuthenticationError("Invalid access token") from exc
    if "sub" not in payload:
        raise AuthenticationError("Access token has no subject")
    return schemas.TokenPayload(sub=int(payload["sub"]), exp=int(payload["exp"]))


def issue_password_reset(db: Session, email: str, *, ttl_minutes: Optional[int] = None) -> Tuple[str, datetime]:
    user = get_user_by_email(db, email)
    if not user:
        raise PasswordResetError("Account not found")
    token = token_urlsafe(32)
    expires_at = datetime.now(tz=timezone.utc) + timedelta(minutes=ttl_minutes or settings.password_reset_ttl_minutes)
    user.reset_token = token
    user.reset_token_expires_at = expires_at
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Issued password reset token for user {user.id}")
    return token, expires_at


def reset_password(db: Session, email: str, token: str, new_password: str) -> models.User:
    user = get_user_by_email(db, email)
    if not user or not user.reset_token:
        raise PasswordResetError("No pending password reset for this account")
    if not user.reset_token_expires_at:
        _clear_reset_token(db, user)
        raise PasswordResetError("The reset link is no longer valid")

    # SQLite hands back naive datetimes
    expires_at = user.reset_token_expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    if expires_at < datetime.now(tz=timezone.utc):
        _clear_reset_token(db, user)
        raise PasswordResetError("The reset link has expired, please request a new one")
    if not compare_digest(user.reset_token, token):
        raise PasswordResetError("The reset token is not correct")

    user.password_hash = hash_password(new_password)
    user.reset_token = None
    user.reset_token_expires_at = None
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> models.User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise AuthenticationError("Account not found")
    if not verify_password(current_password, user.password_hash):
        raise AuthenticationError("The current password is not correct")

    user.password_hash = hash_password(new_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _clear_reset_token(db: Session, user: models.User) -> None:
    user.reset_token = None
    user.reset_token_expires_at = None
    db.add(user)
    db.commit()
