"""
AI-assisted listing routes: descriptions, tagging, suggestions and impact
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Any, Dict, List

from ..config import settings
from ..database import get_db
from ..models.user import User
from ..schemas.ai import (
    AutoTagRequest,
    DescriptionRequest,
    DescriptionResponse,
    ItemSuggestion,
    SustainabilityImpactResponse,
)
from ..schemas.item import ItemFilter
from ..auth.dependencies import get_current_active_user
from ..core.exceptions import ForbiddenError
from ..services import activity
from ..services import items as item_service
from ..services import users as user_service
from ..utils import ai_text

router = APIRouter()


@router.post("/generate-description", response_model=DescriptionResponse)
def generate_description(
    request: DescriptionRequest,
    current_user: User = Depends(get_current_active_user)
):
    return DescriptionResponse(description=ai_text.generate_description(request.model_dump()))


@router.post("/auto-tag-categorize")
def auto_tag_categorize(
    request: AutoTagRequest,
    current_user: User = Depends(get_current_active_user)
) -> Dict[str, Any]:
    """
    Suggested categories and tags. When the model answers with something
    other than JSON the raw text comes back under ``raw_response``.
    """
    return ai_text.auto_tag(text_input=request.text_input, image_url=request.image_url)


@router.get("/personalized-swap-suggestions/{user_id}", response_model=List[ItemSuggestion])
def personalized_swap_suggestions(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    if user_id != current_user.id:
        raise ForbiddenError("Not authorized to view these suggestions")

    user = user_service.get_user(db, user_id)
    own_items = item_service.list_user_items(db, user_id)
    candidates = item_service.list_available(
        db, ItemFilter(exclude_owner_id=user_id), limit=settings.ai_candidate_limit
    )
    return ai_text.suggest_swaps(user, own_items, candidates)


@router.get("/sustainability-impact/{user_id}", response_model=SustainabilityImpactResponse)
def sustainability_impact(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    if user_id != current_user.id:
        raise ForbiddenError("Not authorized to view sustainability impact")

    stats = activity.sustainability_stats(db, user_id)
    message = ai_text.impact_message(stats["completed_swaps"], stats["completed_redemptions"])
    return SustainabilityImpactResponse(**stats, impact_message=message)


@router.get("/compatible-item-suggestions/{item_id}", response_model=List[ItemSuggestion])
def compatible_item_suggestions(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Other available listings that pair well with an item, excluding its owner's"""
    item = item_service.get_item(db, item_id)
    candidates = item_service.list_available(
        db, ItemFilter(exclude_owner_id=item.owner_id), limit=settings.ai_candidate_limit
    )
    return ai_text.suggest_compatible(item, [c for c in candidates if c.id != item.id])
