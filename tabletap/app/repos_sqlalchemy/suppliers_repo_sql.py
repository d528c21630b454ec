"""Supplier directory."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Supplier
from ..schemas import SupplierIn, SupplierOut, SupplierUpdate, to_entities, to_entity
from . import CafeGuard


async def list_suppliers(
    session: AsyncSession, cafe_id: str, active_only: bool = False
) -> list[SupplierOut]:
    query = select(Supplier).where(Supplier.cafe_id == cafe_id).order_by(Supplier.name)
    if active_only:
        query = query.where(Supplier.is_active.is_(True))
    result = await session.execute(query)
    return to_entities(SupplierOut, result.scalars())


async def create_supplier(
    session: AsyncSession, cafe_id: str, payload: SupplierIn
) -> SupplierOut:
    supplier = Supplier(cafe_id=cafe_id, **payload.model_dump())
    session.add(supplier)
    await session.commit()
    return to_entity(SupplierOut, supplier)


async def update_supplier(
    session: AsyncSession, cafe_id: str, supplier_id: str, payload: SupplierUpdate
) -> SupplierOut:
    supplier = await CafeGuard.get_scoped(session, Supplier, supplier_id, cafe_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(supplier, key, value)
    await session.commit()
    return to_entity(SupplierOut, supplier)


async def delete_supplier(session: AsyncSession, cafe_id: str, supplier_id: str) -> None:
    supplier = await CafeGuard.get_scoped(session, Supplier, supplier_id, cafe_id)
    await session.delete(supplier)
    await session.commit()
