"""Customer dish ratings."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from .db import get_session
from .deps import FeatureGate
from .repos_sqlalchemy import ratings_repo_sql
from .schemas import CafeOut, RatingIn
from .utils.responses import ok
from .utils.results import run

router = APIRouter(tags=["ratings"])

ratings_gate = FeatureGate("ratings")


class RatingsPayload(BaseModel):
    ratings: list[RatingIn] = Field(..., min_length=1)


@router.post("/api/public/orders/{order_id}/ratings")
async def rate_order(order_id: str, payload: RatingsPayload) -> dict:
    async with get_session() as session:
        rows = await run(ratings_repo_sql.submit_ratings, session, order_id, payload.ratings)
    return ok([row.model_dump(mode="json") for row in rows])


@router.get("/api/public/menu-items/{item_id}/ratings")
async def item_ratings(item_id: str) -> dict:
    async with get_session() as session:
        rows = await ratings_repo_sql.list_for_item(session, item_id)
    return ok([row.model_dump(mode="json") for row in rows])


@router.get("/api/cafes/{cafe_id}/ratings")
async def cafe_ratings(cafe: CafeOut = Depends(ratings_gate)) -> dict:
    async with get_session() as session:
        return ok(await ratings_repo_sql.list_for_cafe(session, cafe.id))
