"""Staff roster, shifts, attendance and payroll metrics."""

from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from .db import get_session
from .deps import FeatureGate
from .repos_sqlalchemy import staff_repo_sql
from .schemas import BreakPayload, CafeOut, CheckInPayload, ShiftIn, StaffIn
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/cafes/{cafe_id}", tags=["staff"])

staff_gate = FeatureGate("staff")


class ActivePayload(BaseModel):
    is_active: bool


@router.get("/staff")
async def list_staff(cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        rows = await run(staff_repo_sql.list_staff, session, cafe.id)
    return ok([row.model_dump() for row in rows])


@router.post("/staff")
async def create_staff(payload: StaffIn, cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        row = await run(staff_repo_sql.create_staff, session, cafe.id, payload)
    return ok(row.model_dump())


@router.patch("/staff/{staff_id}/active")
async def set_active(
    staff_id: str, payload: ActivePayload, cafe: CafeOut = Depends(staff_gate)
) -> dict:
    async with get_session() as session:
        row = await run(staff_repo_sql.set_active, session, cafe.id, staff_id, payload.is_active)
    return ok(row.model_dump())


@router.delete("/staff/{staff_id}")
async def delete_staff(staff_id: str, cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        await run(staff_repo_sql.delete_staff, session, cafe.id, staff_id)
    return ok({"deleted": staff_id})


@router.get("/shifts")
async def list_shifts(
    day: date | None = None, cafe: CafeOut = Depends(staff_gate)
) -> dict:
    async with get_session() as session:
        rows = await run(staff_repo_sql.list_shifts, session, cafe.id, day)
    return ok([row.model_dump(mode="json") for row in rows])


@router.post("/shifts")
async def create_shift(payload: ShiftIn, cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        row = await run(staff_repo_sql.create_shift, session, cafe.id, payload)
    return ok(row.model_dump(mode="json"))


@router.delete("/shifts/{shift_id}")
async def delete_shift(shift_id: str, cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        await run(staff_repo_sql.delete_shift, session, cafe.id, shift_id)
    return ok({"deleted": shift_id})


@router.get("/attendance")
async def list_attendance(cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        rows = await run(staff_repo_sql.list_attendance, session, cafe.id)
    return ok([row.model_dump(mode="json") for row in rows])


@router.post("/attendance/check-in")
async def check_in(payload: CheckInPayload, cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        row = await run(staff_repo_sql.check_in, session, cafe.id, payload)
    return ok(row.model_dump(mode="json"))


@router.post("/attendance/{attendance_id}/check-out")
async def check_out(attendance_id: str, cafe: CafeOut = Depends(staff_gate)) -> dict:
    async with get_session() as session:
        row = await run(staff_repo_sql.check_out, session, cafe.id, attendance_id)
    return ok(row.model_dump(mode="json"))


@router.post("/attendance/{attendance_id}/break")
async def toggle_break(
    attendance_id: str, payload: BreakPayload, cafe: CafeOut = Depends(staff_gate)
) -> dict:
    async with get_session() as session:
        row = await run(
            staff_repo_sql.set_break, session, cafe.id, attendance_id, payload.on_break
        )
    return ok(row.model_dump(mode="json"))


@router.get("/payroll/metrics")
async def payroll_metrics(cafe: CafeOut = Depends(staff_gate)) -> dict:
    today = datetime.now(timezone.utc).date()
    async with get_session() as session:
        return ok(await staff_repo_sql.payroll_metrics(session, cafe.id, today))
