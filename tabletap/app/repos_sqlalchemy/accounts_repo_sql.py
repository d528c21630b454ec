"""Invoices, business expenses, cash/bank ledger and party balances."""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import AccountsLedger, BusinessExpense, FinancialParty, Invoice
from ..schemas import (
    ExpenseIn,
    ExpenseOut,
    InvoiceIn,
    InvoiceOut,
    LedgerIn,
    LedgerOut,
    PartyIn,
    PartyOut,
    to_entities,
    to_entity,
)
from . import CafeGuard


async def metrics(session: AsyncSession, cafe_id: str, today: date) -> dict:
    """Month-to-date sales and purchases with receivables and payables.

    A party's negative balance is owed to the cafe (receivable); a positive
    balance is owed by the cafe (payable).
    """

    month_start = today.replace(day=1)

    async def invoice_total(kind: str) -> float:
        total = await session.scalar(
            select(func.coalesce(func.sum(Invoice.total_amount), 0)).where(
                Invoice.cafe_id == cafe_id,
                Invoice.type == kind,
                Invoice.invoice_date >= month_start,
            )
        )
        return round(float(total or 0), 2)

    balances = (
        await session.execute(
            select(FinancialParty.outstanding_balance).where(
                FinancialParty.cafe_id == cafe_id
            )
        )
    ).scalars()
    receivables = payables = 0.0
    for balance in balances:
        balance = float(balance or 0)
        if balance < 0:
            receivables += abs(balance)
        elif balance > 0:
            payables += balance
    return {
        "total_sales": await invoice_total("sales"),
        "total_purchase": await invoice_total("purchase"),
        "receivables": round(receivables, 2),
        "payables": round(payables, 2),
    }


async def trend(session: AsyncSession, cafe_id: str) -> list[dict]:
    """Per-date sales, purchase and expense totals, oldest first."""

    daily: dict[date, dict[str, float]] = defaultdict(
        lambda: {"sales": 0.0, "purchase": 0.0, "expense": 0.0}
    )
    invoices = await session.execute(
        select(Invoice.invoice_date, Invoice.type, Invoice.total_amount).where(
            Invoice.cafe_id == cafe_id
        )
    )
    for day, kind, amount in invoices.all():
        key = "sales" if kind == "sales" else "purchase"
        daily[day][key] += float(amount)
    expenses = await session.execute(
        select(BusinessExpense.date, BusinessExpense.amount).where(
            BusinessExpense.cafe_id == cafe_id
        )
    )
    for day, amount in expenses.all():
        daily[day]["expense"] += float(amount)
    return [
        {"date": day.isoformat(), **{k: round(v, 2) for k, v in values.items()}}
        for day, values in sorted(daily.items())
    ]


async def list_invoices(session: AsyncSession, cafe_id: str) -> list[InvoiceOut]:
    result = await session.execute(
        select(Invoice)
        .where(Invoice.cafe_id == cafe_id)
        .order_by(desc(Invoice.invoice_date), desc(Invoice.created_at))
    )
    return to_entities(InvoiceOut, result.scalars())


async def add_invoice(session: AsyncSession, cafe_id: str, payload: InvoiceIn) -> InvoiceOut:
    if payload.party_id:
        await CafeGuard.get_scoped(session, FinancialParty, payload.party_id, cafe_id)
    invoice = Invoice(cafe_id=cafe_id, **payload.model_dump())
    session.add(invoice)
    await session.commit()
    return to_entity(InvoiceOut, invoice)


async def list_expenses(session: AsyncSession, cafe_id: str) -> list[ExpenseOut]:
    result = await session.execute(
        select(BusinessExpense)
        .where(BusinessExpense.cafe_id == cafe_id)
        .order_by(desc(BusinessExpense.date))
    )
    return to_entities(ExpenseOut, result.scalars())


async def add_expense(session: AsyncSession, cafe_id: str, payload: ExpenseIn) -> ExpenseOut:
    expense = BusinessExpense(cafe_id=cafe_id, **payload.model_dump())
    session.add(expense)
    await session.commit()
    return to_entity(ExpenseOut, expense)


async def list_ledger(session: AsyncSession, cafe_id: str) -> list[LedgerOut]:
    result = await session.execute(
        select(AccountsLedger)
        .where(AccountsLedger.cafe_id == cafe_id)
        .order_by(AccountsLedger.account_type, AccountsLedger.account_name)
    )
    return to_entities(LedgerOut, result.scalars())


async def add_ledger_account(
    session: AsyncSession, cafe_id: str, payload: LedgerIn
) -> LedgerOut:
    account = AccountsLedger(cafe_id=cafe_id, **payload.model_dump())
    session.add(account)
    await session.commit()
    return to_entity(LedgerOut, account)


async def list_parties(session: AsyncSession, cafe_id: str) -> list[PartyOut]:
    result = await session.execute(
        select(FinancialParty)
        .where(FinancialParty.cafe_id == cafe_id)
        .order_by(desc(FinancialParty.outstanding_balance))
    )
    return to_entities(PartyOut, result.scalars())


async def add_party(session: AsyncSession, cafe_id: str, payload: PartyIn) -> PartyOut:
    party = FinancialParty(cafe_id=cafe_id, **payload.model_dump())
    session.add(party)
    await session.commit()
    return to_entity(PartyOut, party)
