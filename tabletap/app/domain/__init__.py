"""Domain models and helpers."""

from .order_status import ACTIVE_STATUSES, OrderStatus, TRANSITIONS, can_transition
from .plans import FEATURES, has_access, normalize_plan, required_plan

__all__ = [
    "ACTIVE_STATUSES",
    "OrderStatus",
    "TRANSITIONS",
    "can_transition",
    "FEATURES",
    "has_access",
    "normalize_plan",
    "required_plan",
]
