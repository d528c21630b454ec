"""Floor plan: table listing and status."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .db import get_session
from .deps import FeatureGate
from .repos_sqlalchemy import tables_repo_sql
from .schemas import CafeOut, TableAssign, TableStatusUpdate
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/cafes/{cafe_id}/tables", tags=["tables"])

tables_gate = FeatureGate("tables")


@router.get("")
async def list_tables(cafe: CafeOut = Depends(tables_gate)) -> dict:
    async with get_session() as session:
        tables = await run(tables_repo_sql.list_tables, session, cafe.id)
    return ok([table.model_dump() for table in tables])


@router.patch("/{table_id}/status")
async def set_status(
    table_id: str, payload: TableStatusUpdate, cafe: CafeOut = Depends(tables_gate)
) -> dict:
    async with get_session() as session:
        table = await run(tables_repo_sql.set_status, session, cafe.id, table_id, payload.status)
    return ok(table.model_dump())


@router.post("/{table_id}/assign")
async def assign(
    table_id: str, payload: TableAssign, cafe: CafeOut = Depends(tables_gate)
) -> dict:
    async with get_session() as session:
        table = await run(
            tables_repo_sql.assign_order, session, cafe.id, table_id, payload.order_id
        )
    return ok(table.model_dump())
