# selfanypay/auth/auth_service.py
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Tuple

from sqlalchemy.orm import Session

from selfanypay.auth.security import create_access_token, hash_password, verify_password
from selfanypay.config import Settings
from selfanypay.database import utcnow
from selfanypay.errors import AuthenticationError, NotFoundError, ValidationError
from selfanypay.models.biodata import Biodata
from selfanypay.models.user import User
from selfanypay.schemas.auth_schema import RegisterRequest
from selfanypay.utils.email import EmailSender

logger = logging.getLogger("selfanypay.auth")

INVALID_CREDENTIALS = "Invalid credentials"


def generate_six_digit_code() -> str:
    return str(secrets.randbelow(900_000) + 100_000)


def _expiry(minutes: int) -> datetime:
    return utcnow() + timedelta(minutes=minutes)


def _code_matches(expected, expires, given: str) -> bool:
    if not expected or not expires:
        return False
    if expires < utcnow():
        return False
    return secrets.compare_digest(expected, given)


def register_user(
    db: Session,
    *,
    data: RegisterRequest,
    mailer: EmailSender,
    settings: Settings,
) -> User:
    if db.query(User).filter(User.email == data.email).first():
        raise ValidationError("User with this email already exists", fields=["email"])
    if db.query(User).filter(User.username == data.username).first():
        raise ValidationError("Username is already taken", fields=["username"])

    code = generate_six_digit_code()
    user = User(
        full_name=data.full_name,
        email=data.email,
        username=data.username,
        password_hash=hash_password(data.password, settings.bcrypt_rounds),
        verification_code=code,
        verification_code_expires=_expiry(settings.verification_code_expire_minutes),
        user_type="user",
    )
    user.biodata = Biodata(headline=f"A new member, {data.full_name or data.email}, has joined!")

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("user_registered", extra={"user_id": user.id})
    mailer.send_verification_code(
        user.email, code, user.full_name, settings.verification_code_expire_minutes
    )
    return user


def verify_email(db: Session, *, email: str, code: str, settings: Settings) -> Tuple[User, str]:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise NotFoundError("User not found")
    if user.is_verified:
        raise ValidationError("Email is already verified")
    if not _code_matches(user.verification_code, user.verification_code_expires, code):
        raise ValidationError("Invalid or expired verification code")

    user.is_verified = True
    user.verification_code = None
    user.verification_code_expires = None
    db.commit()
    db.refresh(user)

    logger.info("email_verified", extra={"user_id": user.id})
    return user, create_access_token(user, settings)


def resend_verification_code(
    db: Session, *, email: str, mailer: EmailSender, settings: Settings
) -> None:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise NotFoundError("User not found")
    if user.is_verified:
        raise ValidationError("Email is already verified. Please log in.")

    code = generate_six_digit_code()
    user.verification_code = code
    user.verification_code_expires = _expiry(settings.verification_code_expire_minutes)
    db.commit()

    mailer.send_verification_code(
        user.email, code, user.full_name, settings.verification_code_expire_minutes
    )


def login_user(db: Session, *, email: str, password: str, settings: Settings) -> Tuple[User, str]:
    user = db.query(User).filter(User.email == email).first()

    # same answer for unknown email and wrong password
    if not verify_password(password, user.password_hash if user else None, settings.bcrypt_rounds):
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not user.is_verified:
        raise AuthenticationError("Please verify your email address first")

    user.last_active = utcnow()
    db.commit()
    db.refresh(user)

    logger.info("user_logged_in", extra={"user_id": user.id})
    return user, create_access_token(user, settings)


def forgot_password(db: Session, *, email: str, mailer: EmailSender, settings: Settings) -> None:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        logger.info("password_reset_unknown_email")
        return

    code = generate_six_digit_code()
    user.reset_password_code = code
    user.reset_password_expires = _expiry(settings.verification_code_expire_minutes)
    db.commit()

    mailer.send_password_reset_code(
        user.email, code, user.full_name, settings.verification_code_expire_minutes
    )


def reset_password(
    db: Session,
    *,
    email: str,
    code: str,
    new_password: str,
    settings: Settings,
) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise NotFoundError("User not found")
    if not _code_matches(user.reset_password_code, user.reset_password_expires, code):
        raise ValidationError("Invalid or expired password reset code")

    user.password_hash = hash_password(new_password, settings.bcrypt_rounds)
    user.reset_password_code = None
    user.reset_password_expires = None
    db.commit()
    db.refresh(user)

    logger.info("password_reset", extra={"user_id": user.id})
    return user
