"""
Authentication Router

Handles user signup, login, token refresh and authentication endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field
import logging

from ..core.database_client import get_db, commit_or_rollback
from ..core.auth import (
    get_password_hash,
    authenticate_user,
    token_for,
    get_current_user
)
from ..core.errors import BadRequest, AuthenticationError, PermissionDenied
from ..models.user import User
from ..repositories.users import UserDao

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# Pydantic Models
class UserSignup(BaseModel):
    """User registration request"""
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)  # bcrypt limit is 72 bytes


class UserLogin(BaseModel):
    """User login request"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


# Endpoints

@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(user_data: UserSignup, db: Session = Depends(get_db)):
    """
    Register a new user

    - **name**: User's full name
    - **email**: Valid email address (unique)
    - **password**: Password (min 6 characters)

    Returns JWT token and user information
    """
    users = UserDao(db)

    if users.get_by_email(user_data.email):
        raise BadRequest("User with this email already exists", error="registration_failed")

    try:
        hashed_password = get_password_hash(user_data.password)
    except ValueError as e:
        raise BadRequest(str(e), error="registration_failed")

    new_user = users.create(name=user_data.name.strip(), email=user_data.email,
                            hashed_password=hashed_password)
    commit_or_rollback(db, "registering user")
    db.refresh(new_user)
    logger.info(f"User {new_user.id} registered")

    return {
        "message": "User registered successfully",
        "token": token_for(new_user),
        "token_type": "bearer",
        "user": new_user.to_dict()
    }


@router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Login with email and password

    Returns JWT token and user information
    """
    user = authenticate_user(db, credentials.email, credentials.password)

    if not user:
        raise AuthenticationError("Invalid email or password", error="authentication_failed")

    if not user.is_active:
        raise PermissionDenied("User account is inactive", error="account_inactive")

    return {
        "message": "Login successful",
        "token": token_for(user),
        "token_type": "bearer",
        "user": user.to_dict()
    }


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    """
    Get current authenticated user information

    Requires: Bearer token in Authorization header
    """
    return {"user": current_user.to_dict()}


@router.post("/refresh")
def refresh(current_user: User = Depends(get_current_user)):
    """Issue a fresh token for a caller whose token is still valid."""
    return {
        "message": "Token refreshed successfully",
        "token": token_for(current_user),
        "token_type": "bearer",
        "user": current_user.to_dict()
    }


@router.post("/logout")
def logout():
    """
    Logout endpoint (client-side token removal)

    Note: Since JWT tokens are stateless, actual logout happens on client side
    by removing the token from storage.
    """
    return {"message": "Logged out successfully. Please remove token from client."}
