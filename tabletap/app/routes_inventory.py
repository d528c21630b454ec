"""Inventory, suppliers and purchase orders."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .db import get_session
from .deps import FeatureGate
from .repos_sqlalchemy import (
    inventory_repo_sql,
    purchase_orders_repo_sql,
    suppliers_repo_sql,
)
from .schemas import (
    CafeOut,
    InventoryItemIn,
    InventoryItemUpdate,
    PurchaseOrderIn,
    PurchaseStatusUpdate,
    StockAdjust,
    SupplierIn,
    SupplierUpdate,
)
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/cafes/{cafe_id}", tags=["inventory"])

inventory_gate = FeatureGate("inventory")
suppliers_gate = FeatureGate("suppliers")
purchasing_gate = FeatureGate("purchase_orders")


# -- inventory ---------------------------------------------------------------


@router.get("/inventory/logs")
async def inventory_logs(
    item_id: str | None = None, cafe: CafeOut = Depends(inventory_gate)
) -> dict:
    """Latest 50 stock movements, newest first."""

    async with get_session() as session:
        logs = await run(inventory_repo_sql.list_logs, session, cafe.id, item_id)
    return ok([log.model_dump(mode="json") for log in logs])


@router.get("/inventory")
async def list_inventory(
    low_stock: bool = False, cafe: CafeOut = Depends(inventory_gate)
) -> dict:
    async with get_session() as session:
        items = await run(inventory_repo_sql.list_items, session, cafe.id, low_stock)
    return ok([item.model_dump(mode="json") for item in items])


@router.post("/inventory")
async def create_inventory_item(
    payload: InventoryItemIn, cafe: CafeOut = Depends(inventory_gate)
) -> dict:
    async with get_session() as session:
        item = await run(inventory_repo_sql.create_item, session, cafe.id, payload)
    return ok(item.model_dump(mode="json"))


@router.patch("/inventory/{item_id}")
async def update_inventory_item(
    item_id: str, payload: InventoryItemUpdate, cafe: CafeOut = Depends(inventory_gate)
) -> dict:
    async with get_session() as session:
        item = await run(inventory_repo_sql.update_item, session, cafe.id, item_id, payload)
    return ok(item.model_dump(mode="json"))


@router.post("/inventory/{item_id}/adjust")
async def adjust_stock(
    item_id: str, payload: StockAdjust, cafe: CafeOut = Depends(inventory_gate)
) -> dict:
    async with get_session() as session:
        item = await run(
            inventory_repo_sql.adjust_stock, session, cafe.id, item_id, payload.adjustment
        )
    return ok(item.model_dump(mode="json"))


@router.delete("/inventory/{item_id}")
async def delete_inventory_item(
    item_id: str, cafe: CafeOut = Depends(inventory_gate)
) -> dict:
    async with get_session() as session:
        await run(inventory_repo_sql.delete_item, session, cafe.id, item_id)
    return ok({"deleted": item_id})


# -- suppliers ---------------------------------------------------------------


@router.get("/suppliers")
async def list_suppliers(
    active: bool = False, cafe: CafeOut = Depends(suppliers_gate)
) -> dict:
    async with get_session() as session:
        rows = await run(suppliers_repo_sql.list_suppliers, session, cafe.id, active)
    return ok([row.model_dump() for row in rows])


@router.post("/suppliers")
async def create_supplier(
    payload: SupplierIn, cafe: CafeOut = Depends(suppliers_gate)
) -> dict:
    async with get_session() as session:
        row = await run(suppliers_repo_sql.create_supplier, session, cafe.id, payload)
    return ok(row.model_dump())


@router.patch("/suppliers/{supplier_id}")
async def update_supplier(
    supplier_id: str, payload: SupplierUpdate, cafe: CafeOut = Depends(suppliers_gate)
) -> dict:
    async with get_session() as session:
        row = await run(
            suppliers_repo_sql.update_supplier, session, cafe.id, supplier_id, payload
        )
    return ok(row.model_dump())


@router.delete("/suppliers/{supplier_id}")
async def delete_supplier(
    supplier_id: str, cafe: CafeOut = Depends(suppliers_gate)
) -> dict:
    async with get_session() as session:
        await run(suppliers_repo_sql.delete_supplier, session, cafe.id, supplier_id)
    return ok({"deleted": supplier_id})


# -- purchase orders -----------------------------------------------------------


@router.get("/purchase-orders")
async def list_purchase_orders(cafe: CafeOut = Depends(purchasing_gate)) -> dict:
    async with get_session() as session:
        rows = await run(purchase_orders_repo_sql.list_orders, session, cafe.id)
    return ok([row.model_dump(mode="json") for row in rows])


@router.post("/purchase-orders")
async def create_purchase_order(
    payload: PurchaseOrderIn, cafe: CafeOut = Depends(purchasing_gate)
) -> dict:
    async with get_session() as session:
        row = await run(purchase_orders_repo_sql.create_order, session, cafe.id, payload)
    return ok(row.model_dump(mode="json"))


@router.patch("/purchase-orders/{order_id}/status")
async def update_purchase_status(
    order_id: str,
    payload: PurchaseStatusUpdate,
    cafe: CafeOut = Depends(purchasing_gate),
) -> dict:
    """Change status; ``delivered`` books the lines into inventory."""

    async with get_session() as session:
        row = await run(
            purchase_orders_repo_sql.update_status,
            session,
            cafe.id,
            order_id,
            payload.status,
        )
    return ok(row.model_dump(mode="json"))


@router.delete("/purchase-orders/{order_id}")
async def delete_purchase_order(
    order_id: str, cafe: CafeOut = Depends(purchasing_gate)
) -> dict:
    async with get_session() as session:
        await run(purchase_orders_repo_sql.delete_order, session, cafe.id, order_id)
    return ok({"deleted": order_id})
