"""
Shared API dependencies.
"""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from godown.core import security
from godown.core.exceptions import InventoryError
from godown.database import get_db
from godown.models.user import User
from godown.services.auth_service import auth_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/users/token")


async def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> User:
    """
    Validate access token and return current user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Please authenticate.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = security.decode_access_token(token)
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        user_id = int(subject)
    except (JWTError, ValueError):
        raise credentials_exception

    user = auth_service.get_user_by_id(db, user_id=user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user


def http_error(exc: InventoryError) -> HTTPException:
    """Translate a service-layer failure into the HTTP answer for it."""
    if exc.status_code >= 403:
        logger.warning(f"{type(exc).__name__}: {exc.message}")
    return HTTPException(status_code=exc.status_code, detail=exc.message)
