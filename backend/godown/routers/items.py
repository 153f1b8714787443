"""
API endpoints for items.
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
    ItemCreate,
    ItemDeleteResponse,
    ItemResponse,
    ItemUpdate,
    ItemWithGodown,
    MoveItemRequest,
    MoveItemResponse,
)
from godown.services.filters import ItemFilter
from godown.services.item_service import item_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _unexpected(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed {action}",
    )


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    try:
        return item_service.create_item(db, current_user, payload.model_dump())
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise _unexpected("creating item", e)


@router.get("", response_model=List[ItemWithGodown])
async def list_items(
    godown_id: Optional[str] = None,
    item_status: Optional[List[str]] = Query(None, alias="status"),
    category: Optional[List[str]] = Query(None),
    brand: Optional[List[str]] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    min_quantity: Optional[str] = Query(None, alias="minQuantity"),
    max_quantity: Optional[str] = Query(None, alias="maxQuantity"),
    search: Optional[str] = None,
    attributes: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    limit: Optional[int] = None,
    skip: int = 0,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    List owned items with filters, ``sortBy=field:asc|desc`` and pagination.
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
            attributes=attributes,
        )
        return item_service.list_items(
            db,
            current_user,
            item_filter,
            godown_id=godown_id,
            sort_by=sort_by,
            limit=limit,
            skip=skip,
        )
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        raise _unexpected("listing items", e)


@router.get("/brands/list", response_model=List[str])
async def list_brands(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Distinct brands across the user's items."""
    return item_service.distinct_values(db, current_user, "brand")


@router.get("/categories/list", response_model=List[str])
async def list_categories(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Distinct categories across the user's items."""
    return item_service.distinct_values(db, current_user, "category")


@router.post("/move", response_model=MoveItemResponse)
async def move_item(
    payload: MoveItemRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """Move an item into a godown that has no children."""
    try:
        item = item_service.move_item(db, current_user, payload.itemId, payload.toLocationId)
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise _unexpected("moving item", e)
    return {"message": "Item moved successfully.", "item": item}


@router.get("/{item_id}", response_model=ItemWithGodown)
async def read_item(
    item_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    try:
        return item_service.get_item(db, current_user, item_id)
    except InventoryError as e:
        raise http_error(e)


@router.patch("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: str,
    payload: ItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    try:
        return item_service.update_item(
            db, current_user, item_id, payload.model_dump(exclude_unset=True)
        )
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise _unexpected("updating item", e)


@router.delete("/{item_id}", response_model=ItemDeleteResponse)
async def delete_item(
    item_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    try:
        deleted = item_service.delete_item(db, current_user, item_id)
    except InventoryError as e:
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise _unexpected("deleting item", e)
    return {"message": "Item deleted successfully.", "item": deleted}
