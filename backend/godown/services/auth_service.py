"""
Authentication Service.
"""

from typing import Optional
import logging

from sqlalchemy.orm import Session

from godown.core import security
from godown.core.exceptions import ConflictError
from godown.models.user import User
from godown.services.godown_service import godown_service

logger = logging.getLogger(__name__)


class AuthService:
    def authenticate_user(
        self, db: Session, email: str, password: str
    ) -> Optional[User]:
        """Authenticate a user by email and password."""
        user = self.get_user_by_email(db, email)
        if not user:
            return None
        if not security.verify_password(password, user.hashed_password):
            return None
        return user

    def get_user_by_email(self, db: Session, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        return db.query(User).filter(User.email == email.strip().lower()).first()

    def get_user_by_id(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def create_user(self, db: Session, name: str, email: str, password: str) -> User:
        """Create a new user."""
        email = email.strip().lower()
        if self.get_user_by_email(db, email):
            raise ConflictError("User with this email already exists.")

        db_user = User(
            name=name,
            email=email,
            hashed_password=security.get_password_hash(password),
        )
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        logger.info(f"Registered user {db_user.id}")
        return db_user

    def create_user_token(self, user: User) -> dict:
        """Create access token for user."""
        access_token = security.create_access_token(data={"sub": str(user.id)})
        return {"access_token": access_token, "token_type": "bearer"}

    def delete_user(self, db: Session, user: User) -> None:
        """Delete a user together with every owned godown and item."""
        user_id = user.id
        try:
            removed = godown_service.delete_all_for_owner(db, user)
            db.delete(user)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info(f"Deleted user {user_id} and {removed} godowns")


auth_service = AuthService()
