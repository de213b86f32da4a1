# app/utils/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from app.config.security import SecurityConfig

pwd_context = CryptContext(schemes=SecurityConfig.PASSWORD['schemes'], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT carrying ``data`` plus an expiry claim"""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=SecurityConfig.AUTH['access_token_expire_minutes'])
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(
        to_encode,
        SecurityConfig.AUTH['secret_key'],
        algorithm=SecurityConfig.AUTH['algorithm'],
    )
