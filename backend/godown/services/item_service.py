"""
Item service: CRUD, filtered listing, and moves between leaf godowns.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from godown.config import settings
from godown.core.exceptions import (
    AuthorizationError,
    InvalidInputError,
    NotFoundError,
)
from godown.models.godown import Godown
from godown.models.item import Item
from godown.models.user import User
from godown.services.filters import ItemFilter, validate_id
from godown.services.ownership import load_owned_godown, load_owned_item
from godown.services.serializers import item_to_dict, item_with_godown

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "name": Item.name,
    "quantity": Item.quantity,
    "price": Item.price,
    "category": Item.category,
    "brand": Item.brand,
    "status": Item.status,
    "created_at": Item.created_at,
    "updated_at": Item.updated_at,
}

UPDATABLE_FIELDS = {
    "name",
    "quantity",
    "category",
    "price",
    "status",
    "godown_id",
    "brand",
    "attributes",
    "image_url",
}
NULLABLE_FIELDS = {"attributes", "image_url"}


def parse_sort(sort_by: Optional[str]) -> Tuple[str, bool]:
    """``"price:desc"`` -> ``("price", True)``. Default direction is ascending."""
    if not sort_by:
        return "created_at", False
    field, _, direction = sort_by.partition(":")
    field = field.strip()
    direction = direction.strip().lower() or "asc"
    if field not in SORTABLE_FIELDS:
        raise InvalidInputError(f"Cannot sort by {field!r}.")
    if direction not in ("asc", "desc"):
        raise InvalidInputError("Sort direction must be 'asc' or 'desc'.")
    return field, direction == "desc"


class ItemService:
    def _owned_godown_ids(self, owner: User):
        return select(Godown.id).where(Godown.owner_id == owner.id)

    def create_item(self, db: Session, owner: User, data: Dict[str, Any]) -> Dict[str, Any]:
        godown = load_owned_godown(db, owner, data["godown_id"])
        item = Item(**{**data, "godown_id": godown.id})
        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info(f"User {owner.id} created item {item.id} in godown {godown.id}")
        return item_to_dict(item)

    def get_item(self, db: Session, owner: User, item_id: str) -> Dict[str, Any]:
        return item_with_godown(load_owned_item(db, owner, item_id))

    def update_item(
        self, db: Session, owner: User, item_id: str, updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        invalid = set(updates) - UPDATABLE_FIELDS
        if invalid:
            raise InvalidInputError(f"Invalid updates: {', '.join(sorted(invalid))}")
        for field, value in updates.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise InvalidInputError(f"{field} cannot be null.")

        item = load_owned_item(db, owner, item_id)
        if "godown_id" in updates:
            updates["godown_id"] = load_owned_godown(db, owner, updates["godown_id"]).id

        for field, value in updates.items():
            setattr(item, field, value)
        db.commit()
        db.refresh(item)
        logger.info(f"User {owner.id} updated item {item.id}: {sorted(updates)}")
        return item_to_dict(item)

    def delete_item(self, db: Session, owner: User, item_id: str) -> Dict[str, Any]:
        item = load_owned_item(db, owner, item_id)
        snapshot = item_to_dict(item)
        db.delete(item)
        db.commit()
        logger.info(f"User {owner.id} deleted item {snapshot['id']}")
        return snapshot

    def move_item(
        self, db: Session, owner: User, item_id: str, to_location_id: str
    ) -> Dict[str, Any]:
        """
        Move an item into a leaf godown.

        The item, its current godown and the destination must all exist and
        belong to ``owner``; moving into a godown that has children is refused
        and leaves the item where it was.
        """
        iid = validate_id(item_id, "Item ID")
        destination_id = validate_id(to_location_id, "location ID")

        item = db.query(Item).filter(Item.id == iid).first()
        if item is None:
            raise NotFoundError("Item not found.")
        destination = db.query(Godown).filter(Godown.id == destination_id).first()
        if destination is None:
            raise NotFoundError("Destination location not found.")
        source = db.query(Godown).filter(Godown.id == item.godown_id).first()
        if source is None:
            raise NotFoundError("Source location not found.")

        if source.owner_id != owner.id or destination.owner_id != owner.id:
            raise AuthorizationError("Access denied to item or destination location.")
        if not destination.is_leaf:
            logger.warning(
                f"User {owner.id} tried to move item {item.id} into branch {destination.id}"
            )
            raise InvalidInputError("Items can only be moved to subgodowns with no children.")

        item.godown_id = destination.id
        db.commit()
        db.refresh(item)
        logger.info(f"User {owner.id} moved item {item.id} from {source.id} to {destination.id}")
        return item_with_godown(item)

    def list_items(
        self,
        db: Session,
        owner: User,
        item_filter: ItemFilter,
        godown_id: Optional[str] = None,
        sort_by: Optional[str] = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> List[Dict[str, Any]]:
        """Owned items matching ``item_filter``, sorted and paginated."""
        limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
        if limit < 1 or limit > settings.MAX_PAGE_SIZE:
            raise InvalidInputError(f"limit must be between 1 and {settings.MAX_PAGE_SIZE}.")
        if skip < 0:
            raise InvalidInputError("skip cannot be negative.")
        field, descending = parse_sort(sort_by)

        query = db.query(Item).options(joinedload(Item.godown))
        if godown_id:
            query = query.filter(Item.godown_id == load_owned_godown(db, owner, godown_id).id)
        else:
            query = query.filter(Item.godown_id.in_(self._owned_godown_ids(owner)))
        query = item_filter.apply(query)

        column = SORTABLE_FIELDS[field]
        query = query.order_by(column.desc() if descending else column.asc(), Item.id)
        return [item_with_godown(item) for item in query.offset(skip).limit(limit).all()]

    def distinct_values(self, db: Session, owner: User, field: str) -> List[str]:
        """Sorted distinct ``brand`` or ``category`` values across owned items."""
        column = SORTABLE_FIELDS[field]
        rows = (
            db.query(column)
            .filter(Item.godown_id.in_(self._owned_godown_ids(owner)))
            .distinct()
            .all()
        )
        return sorted(row[0] for row in rows)


item_service = ItemService()
