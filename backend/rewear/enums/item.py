"""
Item enums: listing attributes and availability
"""

import enum


class ItemStatus(str, enum.Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    SWAPPED = "swapped"
    REDEEMED = "redeemed"


class ItemCategory(str, enum.Enum):
    TOPS = "tops"
    BOTTOMS = "bottoms"
    DRESSES = "dresses"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    ACCESSORIES = "accessories"
    ACTIVEWEAR = "activewear"
    FORMAL = "formal"
    SLEEPWEAR = "sleepwear"
    OTHER = "other"


class ItemCondition(str, enum.Enum):
    NEW = "new"
    LIKE_NEW = "like new"
    GENTLY_USED = "gently used"
    WELL_WORN = "well worn"


class ItemSize(str, enum.Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    SIZE_2XL = "2XL"
    SIZE_3XL = "3XL"
    SIZE_4XL = "4XL"
    SIZE_5XL = "5XL"
    ONE_SIZE = "one size"
