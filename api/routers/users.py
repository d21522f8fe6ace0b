"""User router for registration, login and profile lookup."""

from fastapi import APIRouter, Depends, status

from models.user import UserCreate, UserLogin, UserResponse, AuthResponse
from services.auth_service import register_user, login_user, get_profile
from api.dependencies import get_current_user


router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate):
    """Register a new user account and return it with a session token."""
    return await register_user(user_data)


@router.post("/login", response_model=AuthResponse)
async def login(user_data: UserLogin):
    """Authenticate user and return it with a session token."""
    return await login_user(user_data.email, user_data.password)


@router.get("/profile", response_model=UserResponse)
async def profile(current_user: UserResponse = Depends(get_current_user)):
    """Get current authenticated user information."""
    return await get_profile(current_user.id)
