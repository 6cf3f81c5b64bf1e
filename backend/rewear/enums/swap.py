"""
Swap lifecycle states
"""

import enum


class SwapStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SwapStatus.REJECTED, SwapStatus.COMPLETED, SwapStatus.CANCELLED)


class SwapRole(str, enum.Enum):
    """Which side of a swap the acting user is on"""
    INITIATOR = "initiator"
    RECEIVER = "receiver"
    OUTSIDER = "outsider"
