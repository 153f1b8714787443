"""
User account endpoints: signup, login, current user, account deletion.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from godown.config import settings
from godown.core.exceptions import InventoryError
from godown.core.rate_limit import limiter
from godown.database import get_db
from godown.dependencies import get_current_user, http_error
from godown.models.user import User
from godown.schemas import AuthResponse, Token, UserCreate, UserLogin, UserResponse
from godown.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()

BAD_CREDENTIALS = "Incorrect email or password"


def _auth_payload(user: User) -> dict:
    token = auth_service.create_user_token(user)["access_token"]
    return {"user": UserResponse.model_validate(user), "token": token}


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_in: UserCreate, db: Session = Depends(get_db)) -> Any:
    """
    Register a new user and log them in.
    """
    try:
        user = auth_service.create_user(
            db, name=user_in.name, email=user_in.email, password=user_in.password
        )
    except InventoryError as e:
        raise http_error(e)
    return _auth_payload(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request, credentials: UserLogin, db: Session = Depends(get_db)
) -> Any:
    """
    JSON login returning the user and a bearer token.
    """
    user = auth_service.authenticate_user(
        db, email=credentials.email, password=credentials.password
    )
    if not user:
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BAD_CREDENTIALS)
    return _auth_payload(user)


@router.post("/token", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_access_token(
    request: Request,
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """
    OAuth2 compatible token login, get an access token for future requests.
    """
    user = auth_service.authenticate_user(
        db, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BAD_CREDENTIALS)
    return auth_service.create_user_token(user)


@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_user)) -> Any:
    """
    Get current user.
    """
    return current_user


@router.delete("/me", response_model=UserResponse)
async def delete_users_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Delete the current account with all of its godowns and items.
    """
    snapshot = UserResponse.model_validate(current_user)
    try:
        auth_service.delete_user(db, current_user)
    except Exception as e:
        logger.error(f"Error deleting user {snapshot.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete account",
        )
    return snapshot
