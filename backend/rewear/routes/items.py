"""
Item listing routes
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ..database import get_db
from ..models.user import User
from ..schemas.item import ItemCreate, ItemUpdate, ItemResponse, ItemFilter
from ..auth.dependencies import get_current_active_user
from ..enums.item import ItemCategory, ItemCondition, ItemSize
from ..services import items as item_service

router = APIRouter()


@router.post("/", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    item_data: ItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    List a new item (any authenticated user). New items start out available.
    """
    return item_service.create_item(db, current_user.id, item_data)


@router.get("/", response_model=List[ItemResponse])
def get_items(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[ItemCategory] = None,
    size: Optional[ItemSize] = None,
    condition: Optional[ItemCondition] = None,
    search: Optional[str] = None,
    exclude_owner_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """
    Browse available items with filtering (public endpoint)
    """
    filters = ItemFilter(
        category=category,
        size=size,
        condition=condition,
        search=search,
        exclude_owner_id=exclude_owner_id,
    )
    return item_service.list_available(db, filters, skip=skip, limit=limit)


@router.get("/user/{user_id}", response_model=List[ItemResponse])
def get_user_items(user_id: int, db: Session = Depends(get_db)):
    """Every item listed by a user, whatever its status (public endpoint)"""
    return item_service.list_user_items(db, user_id)


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    """
    Get item by ID (public endpoint)
    """
    return item_service.get_item(db, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: int,
    item_update: ItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Edit a listing (owner only, while the item is available and not in an open swap)
    """
    return item_service.update_item(db, item_id, current_user.id, item_update)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    item_service.delete_item(db, item_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
