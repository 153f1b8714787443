"""
API endpoints for godowns and the location hierarchy.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from godown.core.exceptions import InventoryError
from godown.database import get_db
from godown.dependencies import get_current_user, http_error
from godown.models.user import User
from godown.schemas import (
    FilterOptionsResponse,
    GodownCreate,
    GodownDeleteResponse,
    GodownDetail,
    GodownNode,
    GodownSummary,
    GodownUpdate,
)
from godown.services.filters import ItemFilter
from godown.services.godown_service import godown_service
from godown.services.hierarchy import hierarchy_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _unexpected(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed {action}",
    )


@router.post("", response_model=GodownDetail, status_code=status.HTTP_201_CREATED)
async def create_godown(
    payload: GodownCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Create a godown, optionally with an explicit id and a parent."""
    try:
        return godown_service.create_godown(
            db,
            current_user,
            name=payload.name,
            parent_godown=payload.parent_godown,
            godown_id=payload.id,
        )
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise _unexpected("creating godown", e)


@router.get("", response_model=List[GodownNode])
async def read_hierarchy(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Every top-level godown with its full subtree and items."""
    try:
        return hierarchy_service.full_tree(db, current_user)
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        raise _unexpected("loading hierarchy", e)


@router.get("/filtered", response_model=List[GodownNode])
async def read_filtered_hierarchy(
    godown: Optional[str] = None,
    subgodown: Optional[str] = None,
    item_status: Optional[List[str]] = Query(None, alias="status"),
    category: Optional[List[str]] = Query(None),
    brand: Optional[List[str]] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    min_quantity: Optional[str] = Query(None, alias="minQuantity"),
    max_quantity: Optional[str] = Query(None, alias="maxQuantity"),
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Scoped, filtered hierarchy.

    Multi-valued filters accept repeated parameters or comma-separated values.
    """
    try:
        item_filter = ItemFilter.from_params(
            status=item_status,
            category=category,
            brand=brand,
            min_price=min_price,
            max_price=max_price,
            min_quantity=min_quantity,
            max_quantity=max_quantity,
            search=search,
        )
        return hierarchy_service.filtered_tree(
            db, current_user, item_filter, godown_id=godown, subgodown_id=subgodown
        )
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        raise _unexpected("loading filtered hierarchy", e)


@router.get("/options", response_model=FilterOptionsResponse)
async def read_filter_options(
    godown: Optional[str] = None,
    subgodown: Optional[str] = None,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Distinct brands and categories among the items in scope."""
    try:
        return hierarchy_service.filter_options(
            db,
            current_user,
            godown_id=godown,
            subgodown_id=subgodown,
            brand=brand,
            category=category,
        )
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        raise _unexpected("loading filter options", e)


@router.get("/list", response_model=List[GodownSummary])
async def list_godowns(
    parent_godown: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Top-level godowns, or the direct children of ``parent_godown``."""
    try:
        return godown_service.list_godowns(db, current_user, parent_godown=parent_godown)
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        raise _unexpected("listing godowns", e)


@router.get("/{godown_id}", response_model=GodownNode)
async def read_godown(
    godown_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """A single godown with its nested subtree and items."""
    try:
        return hierarchy_service.godown_subtree(db, current_user, godown_id)
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        raise _unexpected("loading godown", e)


@router.patch("/{godown_id}", response_model=GodownDetail)
async def update_godown(
    godown_id: str,
    payload: GodownUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Rename and/or re-parent a godown. ``parent_godown: null`` makes it top level."""
    try:
        return godown_service.update_godown(
            db, current_user, godown_id, payload.model_dump(exclude_unset=True)
        )
    except InventoryError as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise _unexpected("updating godown", e)


@router.delete("/{godown_id}", response_model=GodownDeleteResponse)
async def delete_godown(
    godown_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Delete a godown with all of its items and descendant godowns."""
    try:
        deleted = godown_service.delete_godown(db, current_user, godown_id)
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        raise _unexpected("deleting godown", e)
    return {"message": "Godown deleted successfully.", "godown": deleted}
