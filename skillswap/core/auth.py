"""
Authentication Utilities

Handles password hashing, JWT token generation/validation, and resolving the
caller's identity for protected routes.
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from .config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_DAYS
from .database_client import get_db
from .errors import AuthenticationError, PermissionDenied
from ..models.user import User


# HTTP Bearer token scheme; missing credentials are reported by us as 401
security = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    password_bytes = plain_password.encode('utf-8')
    # Nothing longer than 72 bytes can have been hashed
    if len(password_bytes) > 72:
        return False
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt

    Args:
        password: Plain text password

    Returns:
        Hashed password string

    Raises:
        ValueError: If password exceeds bcrypt's 72 byte limit
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        raise ValueError(f"Password is {len(password_bytes)} bytes, exceeds bcrypt's 72 byte limit")

    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)

    return hashed.decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Dictionary with user data (should include 'sub' with user_id)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def token_for(user: User) -> str:
    return create_access_token(data={"sub": user.id, "email": user.email})


def decode_access_token(token: str) -> dict:
    """
    Decode and validate JWT token

    Raises:
        AuthenticationError: If token is invalid or expired
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token", error="authentication_failed")


def _user_from_token(token: str, db: Session) -> User:
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError("Invalid token", error="authentication_failed")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError("Invalid token", error="authentication_failed")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get current authenticated user from JWT token

    Usage in route:
        @router.get("/protected")
        def protected_route(current_user: User = Depends(get_current_user)):
            return {"user_id": current_user.id}

    Raises:
        AuthenticationError: no token, bad token, or unknown user
        PermissionDenied: the account has been banned
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")

    user = _user_from_token(credentials.credentials, db)

    if not user.is_active:
        raise PermissionDenied("User account is inactive", error="account_inactive")

    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous callers, bad tokens and banned
    accounts resolve to None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        user = _user_from_token(credentials.credentials, db)
    except AuthenticationError:
        return None
    return user if user.is_active else None


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise PermissionDenied("Admin privileges required")
    return current_user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Authenticate user by email and password

    Returns:
        User object if authentication successful, None otherwise
    """
    user = db.query(User).filter(User.email == email.lower()).first()

    if not user:
        return None

    if not verify_password(password, user.hashed_password):
        return None

    return user
