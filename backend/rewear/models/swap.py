"""
Swap model for peer-to-peer item exchanges
"""

from sqlalchemy import Column, Integer, ForeignKey, String, Text, Index, text
from sqlalchemy.orm import relationship
from .base import BaseModel, enum_column_type
from ..enums.swap import SwapStatus


class Swap(BaseModel):
    __tablename__ = "swaps"
    __table_args__ = (
        Index("ix_swaps_receiver_status", "receiver_id", "status"),
        Index("ix_swaps_initiator_status", "initiator_id", "status"),
        # At most one pending swap per pair of items, whichever side proposed it
        Index(
            "uq_swaps_pending_item_pair",
            "item_pair_key",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    # Participants
    initiator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Items on offer: initiator_item belongs to the initiator, receiver_item to the receiver
    initiator_item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    receiver_item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)

    status = Column(enum_column_type(SwapStatus), default=SwapStatus.PENDING, nullable=False)
    message = Column(Text, nullable=True)

    # "<lower item id>:<higher item id>"; see pair_key()
    item_pair_key = Column(String(64), nullable=False)

    # Optimistic lock: concurrent transitions on the same swap cannot both commit
    version = Column(Integer, nullable=False)

    # Relationships
    initiator = relationship("User", foreign_keys=[initiator_id], backref="swaps_initiated")
    receiver = relationship("User", foreign_keys=[receiver_id], backref="swaps_received")
    initiator_item = relationship("Item", foreign_keys=[initiator_item_id])
    receiver_item = relationship("Item", foreign_keys=[receiver_item_id])

    __mapper_args__ = {"version_id_col": version}

    @staticmethod
    def pair_key(first_item_id: int, second_item_id: int) -> str:
        low, high = sorted((first_item_id, second_item_id))
        return f"{low}:{high}"

    @property
    def item_ids(self):
        return [self.initiator_item_id, self.receiver_item_id]
