"""Customer loyalty (Pro plan)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from config import get_settings

from .db import get_session
from .deps import FeatureGate
from .repos_sqlalchemy import crm_repo_sql
from .schemas import CafeOut, RedeemPayload
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/cafes/{cafe_id}/customers", tags=["crm"])

crm_gate = FeatureGate("crm")


@router.get("")
async def list_customers(cafe: CafeOut = Depends(crm_gate)) -> dict:
    async with get_session() as session:
        rows = await run(crm_repo_sql.list_customers, session, cafe.id)
    return ok([row.model_dump(mode="json") for row in rows])


@router.post("/sync")
async def sync_customers(cafe: CafeOut = Depends(crm_gate)) -> dict:
    """Rebuild customer aggregates from completed orders."""

    async with get_session() as session:
        synced = await run(
            crm_repo_sql.sync_customers,
            session,
            cafe.id,
            get_settings().loyalty_spend_per_point,
        )
    return ok({"synced": synced})


@router.post("/{customer_id}/redeem")
async def redeem(
    customer_id: str, payload: RedeemPayload, cafe: CafeOut = Depends(crm_gate)
) -> dict:
    async with get_session() as session:
        row = await run(
            crm_repo_sql.redeem_points,
            session,
            cafe.id,
            customer_id,
            payload.points,
            payload.amount_value,
        )
    return ok(row.model_dump(mode="json"))


@router.get("/{customer_id}/transactions")
async def transactions(customer_id: str, cafe: CafeOut = Depends(crm_gate)) -> dict:
    async with get_session() as session:
        return ok(await crm_repo_sql.list_transactions(session, cafe.id, customer_id))
