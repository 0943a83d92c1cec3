# selfanypay/auth/security.py

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from selfanypay.config import Settings, get_settings
from selfanypay.database import get_db
from selfanypay.errors import AuthenticationError, to_http_exception
from selfanypay.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ================= PASSWORDS =================
@lru_cache(maxsize=None)
def get_pwd_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, rounds: int = 12) -> str:
    return get_pwd_context(rounds).hash(password)


def verify_password(plain: str, hashed: Optional[str], rounds: int = 12) -> bool:
    context = get_pwd_context(rounds)
    if not hashed:
        # keep the unknown-account path as slow as a real check
        context.dummy_verify()
        return False
    return context.verify(plain, hashed)


# ================= TOKENS =================
def create_access_token(user: User, settings: Settings) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": user.id,
        "email": user.email,
        "username": user.username,
        "is_verified": user.is_verified,
        "user_type": user.user_type,
        "exp": exp,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> str:
    try:
        data = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")

    user_id = data.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid or expired token")
    return user_id


# ================= DEPENDENCIES =================
def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    try:
        if not token:
            raise AuthenticationError("Authentication required")
        user_id = decode_access_token(token, settings)
        user = db.get(User, user_id)
        if not user:
            raise AuthenticationError("Authentication required")
    except AuthenticationError as exc:
        raise to_http_exception(exc)
    return user
