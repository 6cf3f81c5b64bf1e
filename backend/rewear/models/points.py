"""
Points ledger model: append-only history of balance changes
"""

from sqlalchemy import Column, Integer, ForeignKey, String
from sqlalchemy.orm import relationship
from .base import BaseModel


class PointsLedgerEntry(BaseModel):
    __tablename__ = "points_ledger"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Positive for credits, negative for debits
    delta_points = Column(Integer, nullable=False)
    reason = Column(String(100), nullable=False)

    # What caused the change, e.g. ("redemption", 12)
    ref_type = Column(String(50), nullable=True)
    ref_id = Column(Integer, nullable=True)

    # Balance right after this entry was applied
    balance_after = Column(Integer, nullable=False)

    user = relationship("User", backref="points_entries")
