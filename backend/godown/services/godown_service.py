"""
Godown mutation service: create, update, cascade delete and flat listing.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from godown.core.exceptions import ConflictError, InvalidInputError
from godown.models.godown import Godown, new_id
from godown.models.item import Item
from godown.models.user import User
from godown.services.filters import validate_id
from godown.services.hierarchy import hierarchy_service
from godown.services.ownership import load_owned_godown
from godown.services.serializers import godown_detail, godown_summary

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "parent_godown"}


class GodownService:
    def refresh_leaf_flag(self, db: Session, godown_id: Optional[str]) -> None:
        """Recompute ``is_leaf`` for one godown from its current children."""
        if godown_id is None:
            return
        godown = db.query(Godown).filter(Godown.id == godown_id).first()
        if godown is None:
            return
        has_children = (
            db.query(Godown.id).filter(Godown.parent_godown_id == godown_id).first()
            is not None
        )
        godown.is_leaf = not has_children

    def _resolve_parent(
        self, db: Session, owner: User, parent_id: str, own_id: Optional[str]
    ) -> Godown:
        parent_id = validate_id(parent_id, "parent_godown ID")
        if own_id is not None and parent_id.lower() == own_id.lower():
            raise InvalidInputError("Godown cannot be its own parent.")
        return load_owned_godown(db, owner, parent_id, "Parent godown")

    def create_godown(
        self,
        db: Session,
        owner: User,
        name: str,
        parent_godown: Optional[str] = None,
        godown_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        if godown_id:
            godown_id = validate_id(godown_id)
            taken = db.query(Godown.id).filter(func.lower(Godown.id) == godown_id.lower())
            if taken.first() is not None:
                raise ConflictError("Godown ID already exists.")

        parent = None
        if parent_godown:
            parent = self._resolve_parent(db, owner, parent_godown, godown_id)

        godown = Godown(
            id=godown_id or new_id(),
            name=name,
            parent_godown_id=parent.id if parent else None,
            owner_id=owner.id,
            is_leaf=True,
        )
        db.add(godown)
        if parent is not None:
            parent.is_leaf = False
        db.commit()
        db.refresh(godown)

        logger.info(
            f"User {owner.id} created godown {godown.id} ({godown.name!r}) "
            f"under {godown.parent_godown_id or 'top level'}"
        )
        return godown_detail(godown)

    def update_godown(
        self, db: Session, owner: User, godown_id: str, updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Apply a partial update. Only ``name`` and ``parent_godown`` may change;
        ``parent_godown: None`` moves the godown to the top level.
        """
        invalid = set(updates) - UPDATABLE_FIELDS
        if invalid:
            raise InvalidInputError(f"Invalid updates: {', '.join(sorted(invalid))}")

        godown = load_owned_godown(db, owner, godown_id)

        if "name" in updates:
            if not updates["name"]:
                raise InvalidInputError("Name is required.")
            godown.name = updates["name"]

        if "parent_godown" in updates:
            old_parent_id = godown.parent_godown_id
            new_parent_id = None
            if updates["parent_godown"]:
                parent = self._resolve_parent(db, owner, updates["parent_godown"], godown.id)
                if parent.id in hierarchy_service.descendant_ids(db, owner.id, [godown.id]):
                    raise InvalidInputError("Godown cannot be moved under its own descendant.")
                new_parent_id = parent.id

            if new_parent_id != old_parent_id:
                godown.parent_godown_id = new_parent_id
                db.flush()
                self.refresh_leaf_flag(db, old_parent_id)
                self.refresh_leaf_flag(db, new_parent_id)

        db.commit()
        db.refresh(godown)
        logger.info(f"User {owner.id} updated godown {godown.id}: {sorted(updates)}")
        return godown_detail(godown)

    def delete_godown(self, db: Session, owner: User, godown_id: str) -> Dict[str, Any]:
        """
        Delete a godown, its items, and every descendant godown with their
        items. Runs in one transaction; a failure rolls the whole cascade back.
        """
        godown = load_owned_godown(db, owner, godown_id)
        snapshot = godown_detail(godown)
        parent_id = godown.parent_godown_id

        doomed = [godown.id] + hierarchy_service.descendant_ids(db, owner.id, [godown.id])
        try:
            item_count = self._delete_godowns(db, doomed)
            self.refresh_leaf_flag(db, parent_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            f"User {owner.id} deleted godown {snapshot['id']} with "
            f"{len(doomed) - 1} sub-godowns and {item_count} items"
        )
        return snapshot

    def _delete_godowns(self, db: Session, godown_ids: List[str]) -> int:
        """Bulk delete items then godowns. Returns the number of items removed."""
        item_count = 0
        for start in range(0, len(godown_ids), 500):
            chunk = godown_ids[start:start + 500]
            item_count += (
                db.query(Item)
                .filter(Item.godown_id.in_(chunk))
                .delete(synchronize_session=False)
            )
        # children before parents so foreign keys hold after every statement
        for godown_id in reversed(godown_ids):
            db.query(Godown).filter(Godown.id == godown_id).delete(synchronize_session=False)
        db.expire_all()
        return item_count

    def delete_all_for_owner(self, db: Session, owner: User) -> int:
        """Cascade delete every godown of a user. Caller commits."""
        roots = hierarchy_service.top_level_godowns(db, owner)
        root_ids = [g.id for g in roots]
        doomed = root_ids + hierarchy_service.descendant_ids(db, owner.id, root_ids)
        self._delete_godowns(db, doomed)
        return len(doomed)

    def list_godowns(
        self, db: Session, owner: User, parent_godown: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Top-level godowns, or the direct children of an owned parent."""
        query = db.query(Godown).filter(Godown.owner_id == owner.id)
        if parent_godown:
            parent = load_owned_godown(db, owner, parent_godown, "Parent godown")
            query = query.filter(Godown.parent_godown_id == parent.id)
        else:
            query = query.filter(Godown.parent_godown_id.is_(None))
        return [godown_summary(g) for g in query.order_by(Godown.name, Godown.id).all()]


godown_service = GodownService()
