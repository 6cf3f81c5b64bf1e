"""
Rating model for user ratings after transactions
"""

from sqlalchemy import Column, Integer, ForeignKey, Text, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel, enum_column_type
from ..enums.transaction import TransactionType


class Rating(BaseModel):
    __tablename__ = "ratings"
    __table_args__ = (
        # One rating per rater, rated user and transaction. Rows without a
        # transaction link hold NULLs and are not constrained.
        UniqueConstraint(
            "rater_id", "rated_user_id", "transaction_type", "transaction_id",
            name="uq_ratings_rater_rated_transaction",
        ),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_rating_range"),
    )

    rater_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # User giving the rating
    rated_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # User being rated

    # Rating (1-5 stars)
    rating = Column(Integer, nullable=False)

    # Optional comment
    comment = Column(Text, nullable=True)

    # Optional link to the swap or redemption being rated
    transaction_type = Column(enum_column_type(TransactionType), nullable=True)
    transaction_id = Column(Integer, nullable=True)

    # Relationships
    rater = relationship("User", foreign_keys=[rater_id], backref="ratings_given")
    rated_user = relationship("User", foreign_keys=[rated_user_id], backref="ratings_received")
