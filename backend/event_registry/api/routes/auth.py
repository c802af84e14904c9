"""
Authentication endpoints: register, login and current account.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_registry.db.session import get_db
from event_registry.schemas.account import AccountCreate, AccountResponse, AccountLogin, Token
from event_registry.services.auth_service import register_account, authenticate_account, get_account
from event_registry.core.security import get_current_user_id

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def register(account_data: AccountCreate, db: AsyncSession = Depends(get_db)):
    """Register a new account."""
    return await register_account(db, account_data)


@router.post("/login", response_model=Token)
async def login(login_data: AccountLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    token = await authenticate_account(db, login_data)
    return Token(access_token=token)


@router.get("/me", response_model=AccountResponse)
async def me(
    account_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_account(db, account_id)
