"""Dining table layout and floor status."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import CafeTable, Order
from ..schemas import TableOut, to_entities, to_entity
from . import CafeGuard

# (section, number of tables, seats per table)
DEFAULT_LAYOUT = (("ac", 28, 4), ("non_ac", 9, 4), ("bar", 5, 2))


async def list_tables(session: AsyncSession, cafe_id: str) -> list[TableOut]:
    """Return the cafe's tables, generating the default layout on first use."""

    query = (
        select(CafeTable)
        .where(CafeTable.cafe_id == cafe_id)
        .order_by(CafeTable.section, CafeTable.table_number)
    )
    tables = list((await session.execute(query)).scalars())
    if not tables:
        for section, count, capacity in DEFAULT_LAYOUT:
            session.add_all(
                CafeTable(
                    cafe_id=cafe_id,
                    section=section,
                    table_number=number,
                    capacity=capacity,
                )
                for number in range(1, count + 1)
            )
        await session.commit()
        tables = list((await session.execute(query)).scalars())
    return to_entities(TableOut, tables)


async def set_status(
    session: AsyncSession, cafe_id: str, table_id: str, status: str
) -> TableOut:
    """Set a table's status; freeing a table detaches its current order."""

    table = await CafeGuard.get_scoped(session, CafeTable, table_id, cafe_id)
    table.status = status
    if status == "available":
        table.current_order_id = None
    await session.commit()
    return to_entity(TableOut, table)


async def assign_order(
    session: AsyncSession, cafe_id: str, table_id: str, order_id: str
) -> TableOut:
    table = await CafeGuard.get_scoped(session, CafeTable, table_id, cafe_id)
    await CafeGuard.get_scoped(session, Order, order_id, cafe_id)
    table.current_order_id = order_id
    table.status = "occupied"
    await session.commit()
    return to_entity(TableOut, table)
