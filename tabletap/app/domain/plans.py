"""Subscription plan entitlements.

Features are registered with the plan they require. Access is granted when
the feature only needs ``basic`` or when the cafe is on exactly ``pro``; a
missing plan counts as ``basic``.
"""

from __future__ import annotations

from typing import Dict

from config import Plan

# Plan required per gated feature area.
FEATURES: Dict[str, Plan] = {
    "menu": Plan.BASIC,
    "orders": Plan.BASIC,
    "tables": Plan.BASIC,
    "ratings": Plan.BASIC,
    "dashboard": Plan.BASIC,
    "inventory": Plan.BASIC,
    "analytics": Plan.PRO,
    "suppliers": Plan.PRO,
    "purchase_orders": Plan.PRO,
    "staff": Plan.BASIC,
    "crm": Plan.PRO,
    "accounts": Plan.PRO,
}


def normalize_plan(plan: str | Plan | None) -> Plan:
    """Map a stored plan value to :class:`Plan`; unknown values are ``basic``."""
    if plan is None:
        return Plan.BASIC
    try:
        return Plan(plan)
    except ValueError:
        return Plan.BASIC


def has_access(current: str | Plan | None, required: str | Plan) -> bool:
    """Return ``True`` if a cafe on ``current`` may use a ``required`` feature."""
    required_plan = Plan(required)
    if required_plan is Plan.BASIC:
        return True
    return normalize_plan(current) is Plan.PRO


def required_plan(feature: str) -> Plan:
    """Return the plan needed for ``feature``; unregistered features need ``pro``."""
    return FEATURES.get(feature, Plan.PRO)
