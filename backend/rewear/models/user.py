"""
User model: profile, points balance and rating aggregate
"""

from sqlalchemy import Column, String, Text, Boolean, Integer, Float, JSON, CheckConstraint
from .base import BaseModel, enum_column_type
from ..enums.user import UserRole


class User(BaseModel):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
        CheckConstraint("rating_average >= 0 AND rating_average <= 5", name="ck_users_rating_average_range"),
        CheckConstraint("rating_count >= 0", name="ck_users_rating_count_non_negative"),
    )

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    avatar_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    location_city = Column(String(100), nullable=True)
    location_state = Column(String(100), nullable=True)
    location_country = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)

    role = Column(enum_column_type(UserRole), default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Economy - written only by the points ledger and rating aggregator
    points = Column(Integer, default=0, nullable=False)
    rating_average = Column(Float, default=0.0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)

    # Preferences used for swap suggestions
    preferred_sizes = Column(JSON, default=list, nullable=False)
    preferred_categories = Column(JSON, default=list, nullable=False)
    preferred_brands = Column(JSON, default=list, nullable=False)
