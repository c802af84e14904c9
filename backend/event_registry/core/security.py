"""
Password hashing, JWT issuance and bearer-token identity resolution.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from event_registry.core.config import get_settings
from event_registry.core.exceptions import UnauthenticatedError
from event_registry.core.timestamps import utcnow

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The caller as resolved from a bearer token."""

    account_id: int
    display_name: str
    role: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": utcnow()})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_account_token(account) -> str:
    """Issue a bearer token carrying the account's id, username and role."""
    return create_access_token(
        data={"sub": str(account.id), "username": account.username, "role": account.role}
    )


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        account_id = int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        raise UnauthenticatedError("Invalid token")

    return Identity(
        account_id=account_id,
        display_name=payload.get("username") or str(account_id),
        role=payload.get("role") or "user",
    )


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None:
        raise UnauthenticatedError("Authorization header is required")
    return decode_access_token(credentials.credentials)


async def get_current_user_id(identity: Identity = Depends(get_current_identity)) -> int:
    return identity.account_id
