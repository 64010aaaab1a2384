"""
Security Module - Handles password hashing and JWT token generation/validation
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
import uuid
import logging

from flowpilot.core.config import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Password hashing context - bcrypt with configurable cost factor
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",  # Automatically upgrade old hashes
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

def hash_password(password: str) -> str:
    """
    Hash a plaintext password using bcrypt.

    bcrypt salts every hash, so hashing the same password twice
    yields different strings; use verify_password to compare.
    """
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    Returns False instead of raising when the stored hash is corrupted.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"❌ Password verification error: {str(e)}")
        return False

def build_token_claims(user: Any) -> Dict[str, Any]:
    """
    Claims shared by access and refresh tokens.

    The frontend decodes these to render the profile without an extra request.
    """
    return {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "fullName": user.full_name,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "lastLogin": user.last_login.isoformat() if user.last_login else None,
    }

def _encode(data: dict, secret: str, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + expires_delta
    to_encode.update({"exp": expire, "type": token_type, "jti": uuid.uuid4().hex})
    encoded_jwt = jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)
    logger.debug(f"✅ Created {token_type} token expiring at {expire}")
    return encoded_jwt

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token for authentication.

    Args:
        data: Claims to encode (must include "sub" with the user ID)
        expires_delta: Optional custom expiration time

    Returns:
        Signed JWT string, HS256 by default
    """
    return _encode(
        data,
        settings.SECRET_KEY,
        ACCESS_TOKEN_TYPE,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create long-lived refresh token signed with the refresh secret"""
    return _encode(
        data,
        settings.REFRESH_SECRET_KEY,
        REFRESH_TOKEN_TYPE,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )

def verify_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[dict]:
    """
    Verify and decode JWT token.

    Args:
        token: JWT string from Authorization header
        token_type: Expected "type" claim - "access" or "refresh"

    Returns:
        Decoded payload dict if valid, None if invalid, expired or of the wrong type

    Verification checks:
        1. Signature is valid with the secret for this token type
        2. Token not expired
        3. Algorithm matches expected
        4. "type" claim matches, so refresh tokens cannot be used as access tokens
    """
    secret = settings.REFRESH_SECRET_KEY if token_type == REFRESH_TOKEN_TYPE else settings.SECRET_KEY
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning(f"⚠️  {token_type.capitalize()} token expired")
        return None
    except JWTError as e:
        logger.warning(f"⚠️  Invalid {token_type} token: {str(e)}")
        return None

    if payload.get("type") != token_type:
        logger.warning(f"⚠️  Expected {token_type} token, got {payload.get('type')}")
        return None
    return payload

def decode_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[str]:
    """
    Extract user ID from JWT token.

    Returns:
        User ID ("sub" claim) if token valid, None otherwise
    """
    payload = verify_token(token, token_type)
    if payload:
        return payload.get("sub")
    return None
