"""
Pydantic schemas for account-related request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class AccountCreate(BaseModel):
    username: str = Field(..., max_length=100)
    email: EmailStr
    password: str = Field(..., max_length=128)


class AccountLogin(BaseModel):
    username: str
    password: str


class AccountResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
