"""
Account service handling registration, login and lookup.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from event_registry.models.account import Account
from event_registry.schemas.account import AccountCreate, AccountLogin
from event_registry.core.exceptions import ConflictError, NotFoundError, UnauthenticatedError, ValidationError
from event_registry.core.security import hash_password, verify_password, create_account_token
from event_registry.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ROLE = "user"


async def register_account(db: AsyncSession, account_data: AccountCreate) -> Account:
    """
    Register a new account with a hashed password.
    Raises ConflictError if the username or email already exists.
    """
    username = account_data.username.strip()
    if not username:
        raise ValidationError("username is required")
    if not account_data.password:
        raise ValidationError("password is required")

    result = await db.execute(select(Account).where(Account.username == username))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="username_exists", username=username)
        raise ConflictError("username already exists")

    result = await db.execute(select(Account).where(Account.email == account_data.email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=account_data.email)
        raise ConflictError("email already exists")

    account = Account(
        username=username,
        email=account_data.email,
        hashed_password=hash_password(account_data.password),
        role=DEFAULT_ROLE,
    )
    db.add(account)
    await db.flush()
    await db.refresh(account)

    logger.info("account_registered", account_id=account.id, username=account.username)
    return account


async def authenticate_account(db: AsyncSession, login_data: AccountLogin) -> str:
    """
    Authenticate an account and return a JWT access token.
    Raises UnauthenticatedError if credentials are invalid.
    """
    result = await db.execute(select(Account).where(Account.username == login_data.username))
    account = result.scalar_one_or_none()

    if not account or not verify_password(login_data.password, account.hashed_password):
        logger.warning("login_failed", username=login_data.username)
        raise UnauthenticatedError("invalid username or password")

    token = create_account_token(account)
    logger.info("account_logged_in", account_id=account.id)
    return token


async def get_account(db: AsyncSession, account_id: int) -> Account:
    account = await db.get(Account, account_id)
    if not account:
        raise NotFoundError("account not found")
    return account
