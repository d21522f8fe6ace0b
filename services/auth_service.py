"""Authentication service for password hashing, user records and JWT session tokens."""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import bcrypt
from jose import JWTError, jwt
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from config.settings import settings
from config.database import database
from config.logging_utils import log_debug, log_success
from models.user import UserCreate, UserResponse, AuthResponse, TokenData
from services.errors import AuthError, NotFoundError, ValidationError, store_errors

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

INVALID_CREDENTIALS = "Invalid email or password"


def get_users_collection():
    """Get the users collection."""
    return database.get_collection("users")


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store and look them up lower-cased."""
    return email.strip().lower()


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        return False
    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> TokenData:
    """
    Decode and validate a JWT token.

    Raises:
        AuthError: If the token is malformed, badly signed, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthError("Not authorized, token failed")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Not authorized, token failed")
    return TokenData(user_id=user_id, email=payload.get("email"))


def issue_token(user: dict) -> str:
    """Issue a session token bound to a stored user document."""
    return create_access_token(data={"sub": str(user["_id"]), "email": user["email"]})


def to_user_response(user: dict) -> UserResponse:
    return UserResponse(id=str(user["_id"]), name=user["name"], email=user["email"])


def to_auth_response(user: dict) -> AuthResponse:
    return AuthResponse(
        id=str(user["_id"]),
        name=user["name"],
        email=user["email"],
        token=issue_token(user)
    )


@store_errors
async def get_user_by_email(email: str) -> Optional[dict]:
    """Get a user from database by email (case-insensitive)."""
    return await get_users_collection().find_one({"email": normalize_email(email)})


@store_errors
async def get_user_by_id(user_id: str) -> Optional[dict]:
    """Get a user from database by ID. Unparseable IDs match no user."""
    if not ObjectId.is_valid(user_id):
        return None
    return await get_users_collection().find_one({"_id": ObjectId(user_id)})


@store_errors
async def register_user(user_data: UserCreate) -> AuthResponse:
    """
    Create a new user and issue a session token.

    Raises:
        ValidationError: If the name is blank, the password is too short or too
            long, or the email is already registered.
    """
    name = user_data.name.strip()
    if not name:
        raise ValidationError("Name is required")
    if len(user_data.password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )
    if len(user_data.password.encode('utf-8')) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")

    email = normalize_email(user_data.email)
    if await get_user_by_email(email):
        raise ValidationError("User already exists")

    user_doc = {
        "name": name,
        "email": email,
        "password_hash": hash_password(user_data.password),
        "created_at": datetime.now(timezone.utc)
    }

    try:
        result = await get_users_collection().insert_one(user_doc)
    except DuplicateKeyError:
        raise ValidationError("User already exists")

    user_doc["_id"] = result.inserted_id
    log_success(f"Registered user id={result.inserted_id}", prefix="AUTH")
    return to_auth_response(user_doc)


async def authenticate_user(email: str, password: str) -> Optional[dict]:
    """Authenticate a user with email and password."""
    user = await get_user_by_email(email)
    if not user:
        return None
    if not verify_password(password, user["password_hash"]):
        return None
    return user


async def login_user(email: str, password: str) -> AuthResponse:
    """
    Verify credentials and issue a session token.

    Raises:
        AuthError: For an unknown email or a wrong password, with the same message.
    """
    user = await authenticate_user(email, password)
    if user is None:
        log_debug("Rejected login attempt", prefix="AUTH")
        raise AuthError(INVALID_CREDENTIALS)
    log_debug(f"Login succeeded for user id={user['_id']}", prefix="AUTH")
    return to_auth_response(user)


def verify_token(token: str) -> str:
    """Validate a session token and return the user id it is bound to."""
    return decode_token(token).user_id


async def get_profile(user_id: str) -> UserResponse:
    """
    Return the public fields of a user.

    Raises:
        NotFoundError: If no user with that id exists.
    """
    user = await get_user_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return to_user_response(user)


async def create_email_index() -> bool:
    """Create unique index on email field for fast lookups."""
    try:
        await get_users_collection().create_index("email", unique=True)
        return True
    except Exception as e:
        logger.warning(f"Could not create email index: {e}")
        return False
