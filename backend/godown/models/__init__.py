"""
Database models for the Godown inventory API.

All SQLAlchemy models are imported here so metadata is complete.
"""

from godown.models.user import User
from godown.models.godown import Godown
from godown.models.item import Item, ItemStatus

__all__ = [
    "User",
    "Godown",
    "Item",
    "ItemStatus",
]
