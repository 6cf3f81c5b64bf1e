"""
Redemption and rating enums
"""

import enum


class RedemptionStatus(str, enum.Enum):
    # Only COMPLETED is produced today; the others are kept for a review/refund flow
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TransactionType(str, enum.Enum):
    SWAP = "swap"
    REDEMPTION = "redemption"
