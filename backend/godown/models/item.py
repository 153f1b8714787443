"""
Item (stock record) database model.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, JSON, Index
from sqlalchemy.orm import relationship

from godown.database import Base
from godown.models.godown import new_id


class ItemStatus(str, enum.Enum):
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"


class Item(Base):
    """Stock record stored in exactly one godown."""

    __tablename__ = "items"
    __table_args__ = (
        Index("idx_item_godown", "godown_id"),
        Index("idx_item_godown_name", "godown_id", "name"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    status = Column(
        Enum(ItemStatus, values_callable=lambda e: [m.value for m in e]),
        default=ItemStatus.IN_STOCK,
        nullable=False,
    )
    godown_id = Column(String(36), ForeignKey("godowns.id"), nullable=False)
    brand = Column(String, nullable=False)
    attributes = Column(JSON, nullable=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    godown = relationship("Godown", back_populates="items")
