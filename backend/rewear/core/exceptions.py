"""
Marketplace error taxonomy.

Every failure of a core operation is raised as a subclass of
``MarketplaceError``. Callers branch on the class or on ``code``; the HTTP
layer renders ``status_code`` and ``detail``.
"""

from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    code = "marketplace_error"
    status_code = 400
    default_detail = "Request could not be completed"

    def __init__(self, detail: Optional[str] = None, **context: Any):
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.detail, "code": self.code}
        if self.context:
            payload["context"] = self.context
        return payload


class NotFoundError(MarketplaceError):
    code = "not_found"
    status_code = 404
    default_detail = "Resource not found"


class ForbiddenError(MarketplaceError):
    code = "forbidden"
    status_code = 403
    default_detail = "Not authorized to perform this action"


class InvalidStateError(MarketplaceError):
    code = "invalid_state"
    default_detail = "Operation is not allowed in the current state"


class InvalidTransitionError(InvalidStateError):
    code = "invalid_transition"

    def __init__(self, current: str, requested: str, role: str, detail: Optional[str] = None):
        self.current = current
        self.requested = requested
        self.role = role
        super().__init__(
            detail or f"Cannot move swap from '{current}' to '{requested}' as {role}",
            current=current,
            requested=requested,
            role=role,
        )


class ItemUnavailableError(InvalidStateError):
    code = "item_unavailable"
    default_detail = "Item is not available"


class InsufficientFundsError(MarketplaceError):
    code = "insufficient_funds"
    default_detail = "Insufficient points"


class PointsMismatchError(MarketplaceError):
    code = "points_mismatch"
    default_detail = "Points used do not match the item's points value"


class DuplicateRatingError(MarketplaceError):
    code = "duplicate_rating"
    status_code = 409
    default_detail = "You have already rated this transaction"


class SelfRatingError(MarketplaceError):
    code = "self_rating"
    default_detail = "Cannot rate yourself"


class InvalidRatingError(MarketplaceError):
    code = "invalid_rating"
    default_detail = "Rating must be an integer between 1 and 5"


class ConflictError(MarketplaceError):
    code = "conflict"
    status_code = 409
    default_detail = "The resource was modified by a concurrent request"
