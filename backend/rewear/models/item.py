"""
Item model for clothing listings
"""

from sqlalchemy import Column, Integer, ForeignKey, String, Text, JSON, Index, CheckConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel, enum_column_type
from ..enums.item import ItemStatus, ItemCategory, ItemCondition, ItemSize


class Item(BaseModel):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("points_value >= 0", name="ck_items_points_value_non_negative"),
        Index("ix_items_owner_status", "owner_id", "status"),
    )

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(enum_column_type(ItemCategory), nullable=False, index=True)
    condition = Column(enum_column_type(ItemCondition), nullable=False)
    size = Column(enum_column_type(ItemSize), nullable=False)
    tags = Column(JSON, default=list, nullable=False)
    image_urls = Column(JSON, default=list, nullable=False)

    # Only the swap and redemption services move an item between statuses
    status = Column(enum_column_type(ItemStatus), default=ItemStatus.AVAILABLE, nullable=False, index=True)
    points_value = Column(Integer, default=0, nullable=False)

    # Set at creation, never reassigned
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    owner = relationship("User", backref="items")
