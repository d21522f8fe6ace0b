"""User models for authentication and database storage."""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class UserCreate(BaseModel):
    """Schema for user registration."""
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str


class UserLogin(BaseModel):
    """Schema for user login."""
    email: str
    password: str


class UserResponse(BaseModel):
    """Schema for user response (without sensitive data)."""
    id: str
    name: str
    email: str


class AuthResponse(UserResponse):
    """Schema for register/login response: the user plus a bearer token."""
    token: str


class TokenData(BaseModel):
    """Schema for decoded token data."""
    user_id: str
    email: Optional[str] = None
