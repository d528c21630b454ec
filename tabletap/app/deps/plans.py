"""Plan entitlement enforcement for cafe-scoped routes."""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import Depends, HTTPException, Request

from ..domain.plans import has_access, required_plan
from ..schemas import CafeOut
from ..utils.responses import err
from .cafe import get_owned_cafe

logger = logging.getLogger("api")

UPSELL = "Upgrade to Pro to unlock {feature}."


class FeatureGate:
    """Dependency guarding a feature area by subscription plan.

    ``mode="block"`` refuses the request with a ``PLAN_403`` envelope.
    ``mode="blur"`` lets the handler run and records the lock on
    ``request.state`` so the handler can wrap its payload with :meth:`wrap`.
    """

    def __init__(self, feature: str, mode: Literal["block", "blur"] = "block"):
        self.feature = feature
        self.mode = mode

    @property
    def upsell(self) -> str:
        return UPSELL.format(feature=self.feature.replace("_", " "))

    async def __call__(
        self, request: Request, cafe: CafeOut = Depends(get_owned_cafe)
    ) -> CafeOut:
        allowed = has_access(cafe.subscription_plan, required_plan(self.feature))
        request.state.plan_locked = not allowed
        if allowed:
            return cafe
        logger.info("plan gate %s hit by cafe %s", self.feature, cafe.id)
        if self.mode == "block":
            raise HTTPException(
                status_code=403,
                detail=err("PLAN_403", "Feature requires a higher plan", hint=self.upsell),
            )
        return cafe

    def wrap(self, request: Request, data: Any) -> Any:
        """Return ``data`` unchanged or as a locked preview in blur mode."""
        if getattr(request.state, "plan_locked", False):
            return {"locked": True, "upsell": self.upsell, "data": data}
        return data
