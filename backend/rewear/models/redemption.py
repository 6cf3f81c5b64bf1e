"""
Redemption model: an item acquired with points
"""

from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel, enum_column_type
from ..enums.transaction import RedemptionStatus


class Redemption(BaseModel):
    __tablename__ = "redemptions"
    __table_args__ = (
        CheckConstraint("points_used > 0", name="ck_redemptions_points_used_positive"),
    )

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    points_used = Column(Integer, nullable=False)
    status = Column(enum_column_type(RedemptionStatus), default=RedemptionStatus.COMPLETED, nullable=False)

    # Relationships
    user = relationship("User", backref="redemptions")
    item = relationship("Item", backref="redemptions")
