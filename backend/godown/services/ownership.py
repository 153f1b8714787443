"""
Lookups that resolve an id to an entity owned by the requesting user.

Policy: an unknown id raises NotFoundError, an id owned by someone else
raises AuthorizationError, a malformed id raises InvalidInputError.
"""

from sqlalchemy.orm import Session

from godown.core.exceptions import AuthorizationError, NotFoundError
from godown.models.godown import Godown
from godown.models.item import Item
from godown.models.user import User
from godown.services.filters import validate_id


def load_owned_godown(db: Session, owner: User, godown_id: str, label: str = "Godown") -> Godown:
    gid = validate_id(godown_id, f"{label} ID")
    godown = db.query(Godown).filter(Godown.id == gid).first()
    if godown is None:
        raise NotFoundError(f"{label} not found.")
    if godown.owner_id != owner.id:
        raise AuthorizationError(f"Access denied to {label.lower()} {gid}.")
    return godown


def load_owned_item(db: Session, owner: User, item_id: str) -> Item:
    """Item ownership is checked through the owner of its godown."""
    iid = validate_id(item_id, "Item ID")
    item = db.query(Item).filter(Item.id == iid).first()
    if item is None:
        raise NotFoundError("Item not found.")
    godown = db.query(Godown).filter(Godown.id == item.godown_id).first()
    if godown is None:
        raise NotFoundError("Source godown not found.")
    if godown.owner_id != owner.id:
        raise AuthorizationError("Access denied to item.")
    return item
