"""
Authentication API - Registration, login, token refresh and logout endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from datetime import datetime
from uuid import UUID
import time
import logging

from flowpilot.database import get_db
from flowpilot.schemas import UserCreate, UserLogin, TokenResponse, RefreshResponse, UserResponse
from flowpilot.models import User
from flowpilot.core.security import (
    REFRESH_TOKEN_TYPE,
    build_token_claims,
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from flowpilot.core.dependencies import get_current_user, security
from flowpilot.utils.audit_logger import (
    log_user_login,
    log_user_logout,
    log_user_register,
    log_token_refresh,
)

logger = logging.getLogger(__name__)
router = APIRouter()

def _issue_tokens(user: User):
    """Create an access/refresh pair and remember the refresh token on the user"""
    claims = build_token_claims(user)
    access_token = create_access_token(data=claims)
    refresh_token = create_refresh_token(data=claims)
    user.token = refresh_token
    return access_token, refresh_token

def _safe_audit(audit_fn, **kwargs) -> None:
    """Auth flows must not fail because the audit trail could not be written"""
    try:
        audit_fn(**kwargs)
    except Exception as e:
        logger.error(f"⚠️  Failed to write auth audit log: {str(e)}")

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,  # Validated by Pydantic (email, password, name, fullName)
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Register new user account.

    Process:
        1. Validate input (Pydantic handles this)
        2. Check if email already exists
        3. Hash password and create user
        4. Issue access and refresh tokens
        5. Log registration in audit trail

    Raises:
        409: Email already registered
        500: Database error
    """
    logger.info(f"➡️  Registration attempt for email: {user_data.email}")

    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        logger.warning(f"⚠️  Registration failed - email already exists: {user_data.email}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered. Please use a different email or login."
        )

    new_user = User(
        email=user_data.email,
        name=user_data.name,
        full_name=user_data.full_name,
        password=hash_password(user_data.password),
    )

    try:
        db.add(new_user)
        db.flush()  # Assign ID and created_at before building token claims
        access_token, refresh_token = _issue_tokens(new_user)
        db.commit()
        db.refresh(new_user)
        logger.info(f"✅ User registered successfully: {new_user.email}")
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Registration failed for {user_data.email}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed. Please try again later."
        )

    _safe_audit(log_user_register, db=db, user=new_user, request=request)

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        user=UserResponse.model_validate(new_user)
    )

@router.post("/login", response_model=TokenResponse)
def login(
    credentials: UserLogin,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return an access/refresh token pair.

    Unknown email and wrong password both answer 401 "Invalid credentials"
    so the response does not reveal which accounts exist.
    """
    started = time.perf_counter()
    logger.info(f"➡️  Login attempt for email: {credentials.email}")

    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not verify_password(credentials.password, user.password):
        reason = "incorrect password" if user else "user not found"
        logger.warning(f"⚠️  Login failed - {reason}: {credentials.email}")
        _safe_audit(
            log_user_login,
            db=db,
            user=user,
            email=credentials.email,
            request=request,
            success=False,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    try:
        user.last_login = datetime.utcnow()
        access_token, refresh_token = _issue_tokens(user)
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to store session for {user.email}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed. Please try again later."
        )

    _safe_audit(
        log_user_login,
        db=db,
        user=user,
        email=user.email,
        request=request,
        success=True,
        duration_ms=(time.perf_counter() - started) * 1000,
    )
    logger.info(f"✅ Login successful: {user.email}")

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )

@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
):
    """
    Exchange a refresh token for a new token pair.

    The presented token must be a valid refresh token and must match the
    one stored on the user; the stored token is rotated on success.
    """
    if credentials is None:
        logger.warning("⚠️  Refresh attempted without token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token is required"
        )

    token = credentials.credentials
    user = None
    user_id = decode_token(token, token_type=REFRESH_TOKEN_TYPE)
    if user_id:
        try:
            user = db.query(User).filter(User.id == UUID(user_id)).first()
        except ValueError:
            user = None

    if not user or user.token != token:
        logger.warning("⚠️  Invalid refresh token presented")
        _safe_audit(log_token_refresh, db=db, user=user, request=request, success=False)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token"
        )

    try:
        access_token, refresh_token = _issue_tokens(user)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Token refresh failed for {user.email}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Token refresh failed. Please try again later."
        )

    _safe_audit(log_token_refresh, db=db, user=user, request=request, success=True)
    logger.info(f"✅ Tokens refreshed for: {user.email}")

    return RefreshResponse(access_token=access_token, refresh_token=refresh_token)

@router.post("/logout", status_code=status.HTTP_200_OK)
def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Logout current user.

    Access tokens stay valid until they expire; clearing the stored
    refresh token stops the session from being extended.
    """
    logger.info(f"➡️  Logout request from: {current_user.email}")

    try:
        current_user.token = None
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to clear refresh token: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Logout failed. Please try again later."
        )

    _safe_audit(log_user_logout, db=db, user=current_user, request=request)
    logger.info(f"✅ User logged out: {current_user.email}")

    return {"message": "Successfully logged out"}

@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """
    Get current user's profile information.

    Used by frontend to verify token and get user data.
    """
    logger.debug(f"➡️  Profile request from: {current_user.email}")
    return UserResponse.model_validate(current_user)
