"""Staff records, shift roster and attendance."""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Staff, StaffAttendance, StaffShift, utcnow
from ..schemas import (
    AttendanceOut,
    CheckInPayload,
    ShiftIn,
    ShiftOut,
    StaffIn,
    StaffOut,
    to_entities,
    to_entity,
)
from . import CafeGuard


async def list_staff(session: AsyncSession, cafe_id: str) -> list[StaffOut]:
    result = await session.execute(
        select(Staff).where(Staff.cafe_id == cafe_id).order_by(Staff.name)
    )
    return to_entities(StaffOut, result.scalars())


async def create_staff(session: AsyncSession, cafe_id: str, payload: StaffIn) -> StaffOut:
    member = Staff(cafe_id=cafe_id, **payload.model_dump())
    session.add(member)
    await session.commit()
    return to_entity(StaffOut, member)


async def set_active(
    session: AsyncSession, cafe_id: str, staff_id: str, is_active: bool
) -> StaffOut:
    member = await CafeGuard.get_scoped(session, Staff, staff_id, cafe_id)
    member.is_active = is_active
    await session.commit()
    return to_entity(StaffOut, member)


async def delete_staff(session: AsyncSession, cafe_id: str, staff_id: str) -> None:
    member = await CafeGuard.get_scoped(session, Staff, staff_id, cafe_id)
    await session.delete(member)
    await session.commit()


# -- shifts -----------------------------------------------------------------


async def list_shifts(
    session: AsyncSession, cafe_id: str, day: date | None = None
) -> list[ShiftOut]:
    """Return shifts ordered by start; ``day`` limits to shifts starting that UTC day."""

    query = select(StaffShift).where(StaffShift.cafe_id == cafe_id)
    if day is not None:
        start = datetime.combine(day, time.min, timezone.utc)
        end = datetime.combine(day, time.max, timezone.utc)
        query = query.where(StaffShift.start_time >= start, StaffShift.start_time <= end)
    result = await session.execute(query.order_by(StaffShift.start_time))
    return to_entities(ShiftOut, result.scalars())


async def create_shift(session: AsyncSession, cafe_id: str, payload: ShiftIn) -> ShiftOut:
    await CafeGuard.get_scoped(session, Staff, payload.staff_id, cafe_id)
    start = _utc(payload.start_time)
    end = _utc(payload.end_time)
    if end <= start:
        raise ValueError("shift must end after it starts")
    shift = StaffShift(
        cafe_id=cafe_id,
        staff_id=payload.staff_id,
        start_time=start,
        end_time=end,
        notes=payload.notes,
    )
    session.add(shift)
    await session.commit()
    return to_entity(ShiftOut, shift)


async def delete_shift(session: AsyncSession, cafe_id: str, shift_id: str) -> None:
    shift = await CafeGuard.get_scoped(session, StaffShift, shift_id, cafe_id)
    await session.delete(shift)
    await session.commit()


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# -- attendance -------------------------------------------------------------


async def check_in(
    session: AsyncSession, cafe_id: str, payload: CheckInPayload
) -> AttendanceOut:
    """Open an attendance record; a member can only be checked in once at a time."""

    await CafeGuard.get_scoped(session, Staff, payload.staff_id, cafe_id)
    if payload.shift_id:
        await CafeGuard.get_scoped(session, StaffShift, payload.shift_id, cafe_id)
    open_record = await session.scalar(
        select(StaffAttendance.id).where(
            StaffAttendance.staff_id == payload.staff_id,
            StaffAttendance.check_out.is_(None),
        )
    )
    if open_record is not None:
        raise ValueError("staff member already checked in")
    record = StaffAttendance(
        cafe_id=cafe_id,
        staff_id=payload.staff_id,
        shift_id=payload.shift_id,
        check_in=utcnow(),
        status="present",
    )
    session.add(record)
    await session.commit()
    return to_entity(AttendanceOut, record)


async def check_out(
    session: AsyncSession, cafe_id: str, attendance_id: str
) -> AttendanceOut:
    record = await CafeGuard.get_scoped(session, StaffAttendance, attendance_id, cafe_id)
    if record.check_out is not None:
        raise ValueError("already checked out")
    record.check_out = utcnow()
    record.status = "present"
    await session.commit()
    return to_entity(AttendanceOut, record)


async def set_break(
    session: AsyncSession, cafe_id: str, attendance_id: str, on_break: bool
) -> AttendanceOut:
    record = await CafeGuard.get_scoped(session, StaffAttendance, attendance_id, cafe_id)
    if record.check_out is not None:
        raise ValueError("already checked out")
    record.status = "on_break" if on_break else "present"
    await session.commit()
    return to_entity(AttendanceOut, record)


async def list_attendance(
    session: AsyncSession, cafe_id: str, limit: int = 50
) -> list[AttendanceOut]:
    result = await session.execute(
        select(StaffAttendance)
        .where(StaffAttendance.cafe_id == cafe_id)
        .order_by(desc(StaffAttendance.check_in))
        .limit(limit)
    )
    return to_entities(AttendanceOut, result.scalars())


async def payroll_metrics(session: AsyncSession, cafe_id: str, today: date) -> dict:
    """Headcount plus today's working, on-break and on-leave counts."""

    start = datetime.combine(today, time.min, timezone.utc)
    total = await session.scalar(
        select(func.count()).select_from(Staff).where(Staff.cafe_id == cafe_id)
    )
    result = await session.execute(
        select(StaffAttendance.status, StaffAttendance.check_out).where(
            StaffAttendance.cafe_id == cafe_id, StaffAttendance.check_in >= start
        )
    )
    rows = result.all()
    open_rows = [status for status, checked_out in rows if checked_out is None]
    on_break = sum(1 for status in open_rows if status == "on_break")
    return {
        "total_employees": int(total or 0),
        "currently_working": len(open_rows) - on_break,
        "on_break": on_break,
        "on_leave": sum(1 for status, _ in rows if status == "on_leave"),
    }
