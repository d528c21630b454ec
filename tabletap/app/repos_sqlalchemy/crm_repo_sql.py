"""Customer loyalty aggregates.

Customers are not updated when orders change; :func:`sync_customers`
rebuilds the aggregate from completed named orders on demand.
"""

from __future__ import annotations

import math

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import OrderStatus
from ..models import Customer, LoyaltyTransaction, Order
from ..schemas import CustomerOut, as_utc, to_entities, to_entity


async def list_customers(session: AsyncSession, cafe_id: str) -> list[CustomerOut]:
    result = await session.execute(
        select(Customer)
        .where(Customer.cafe_id == cafe_id)
        .order_by(desc(Customer.total_spend))
    )
    return to_entities(CustomerOut, result.scalars())


async def sync_customers(
    session: AsyncSession, cafe_id: str, spend_per_point: int = 10
) -> int:
    """Fold completed orders into per-name customer rows.

    New customers start with ``floor(spend / spend_per_point)`` points.
    Existing customers get spend, visit count and last visit refreshed while
    their points balance is left untouched. Returns the number of customers
    written.
    """

    result = await session.execute(
        select(
            Order.customer_name,
            func.sum(Order.total_amount),
            func.count(Order.id),
            func.max(Order.created_at),
        )
        .where(
            Order.cafe_id == cafe_id,
            Order.status == OrderStatus.COMPLETED.value,
            Order.customer_name.is_not(None),
            Order.customer_name != "",
        )
        .group_by(Order.customer_name)
    )
    totals = result.all()
    existing = {
        row.customer_name: row
        for row in (
            await session.execute(select(Customer).where(Customer.cafe_id == cafe_id))
        ).scalars()
    }
    for name, spend, visits, last_visit in totals:
        spend = round(float(spend or 0), 2)
        customer = existing.get(name)
        if customer is None:
            session.add(
                Customer(
                    cafe_id=cafe_id,
                    customer_name=name,
                    total_spend=spend,
                    visit_count=int(visits),
                    last_visit=as_utc(last_visit),
                    loyalty_points=math.floor(spend / spend_per_point),
                )
            )
        else:
            customer.total_spend = spend
            customer.visit_count = int(visits)
            customer.last_visit = as_utc(last_visit)
    await session.commit()
    return len(totals)


async def redeem_points(
    session: AsyncSession,
    cafe_id: str,
    customer_id: str,
    points: int,
    amount_value: float,
) -> CustomerOut:
    """Deduct ``points`` in a single conditional update and log the redemption.

    Raises ``ValueError`` when the balance is insufficient.
    """

    customer = await session.get(Customer, customer_id)
    if customer is None or customer.cafe_id != cafe_id:
        raise LookupError("customer not found")
    result = await session.execute(
        update(Customer)
        .where(
            Customer.id == customer_id,
            Customer.cafe_id == cafe_id,
            Customer.loyalty_points >= points,
        )
        .values(loyalty_points=Customer.loyalty_points - points)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await session.rollback()
        raise ValueError("insufficient loyalty points")
    session.add(
        LoyaltyTransaction(
            cafe_id=cafe_id,
            customer_id=customer_id,
            points=-points,
            type="redeem",
            description=f"Redeemed for ${amount_value:.2f}",
        )
    )
    await session.commit()
    await session.refresh(customer)
    return to_entity(CustomerOut, customer)


async def list_transactions(
    session: AsyncSession, cafe_id: str, customer_id: str
) -> list[dict]:
    result = await session.execute(
        select(LoyaltyTransaction)
        .where(
            LoyaltyTransaction.cafe_id == cafe_id,
            LoyaltyTransaction.customer_id == customer_id,
        )
        .order_by(desc(LoyaltyTransaction.created_at))
    )
    return [
        {
            "id": row.id,
            "points": row.points,
            "type": row.type,
            "description": row.description,
            "created_at": as_utc(row.created_at).isoformat(),
        }
        for row in result.scalars()
    ]
