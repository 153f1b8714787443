"""
Godown (storage location) database model.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from godown.database import Base


def new_id() -> str:
    """Generate a fresh location/item identifier."""
    return str(uuid.uuid4())


class Godown(Base):
    """
    Storage location. Top-level godowns have no parent; sub-godowns point at
    their parent. ``is_leaf`` mirrors "has no child godowns" and is refreshed
    by the service layer on every structural change.
    """

    __tablename__ = "godowns"
    __table_args__ = (
        Index("idx_godown_owner_parent", "owner_id", "parent_godown_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    parent_godown_id = Column(String(36), ForeignKey("godowns.id"), nullable=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_leaf = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="godowns")
    parent = relationship("Godown", remote_side=[id], back_populates="sub_godowns")
    sub_godowns = relationship("Godown", back_populates="parent")
    items = relationship("Item", back_populates="godown")

    @property
    def is_top_level(self) -> bool:
        return self.parent_godown_id is None

    def __repr__(self):
        return f"<Godown {self.id} {self.name!r}>"
