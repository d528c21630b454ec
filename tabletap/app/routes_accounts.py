"""Accounting: invoices, expenses, ledger and parties (Pro plan)."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from .db import get_session
from .deps import FeatureGate
from .repos_sqlalchemy import accounts_repo_sql
from .schemas import CafeOut, ExpenseIn, InvoiceIn, LedgerIn, PartyIn
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/cafes/{cafe_id}/accounts", tags=["accounts"])

accounts_gate = FeatureGate("accounts")
overview_gate = FeatureGate("accounts", mode="blur")


@router.get("/metrics")
async def metrics(request: Request, cafe: CafeOut = Depends(overview_gate)) -> dict:
    """Month-to-date overview; locked cafes get a blurred preview."""

    today = datetime.now(timezone.utc).date()
    async with get_session() as session:
        data = await run(accounts_repo_sql.metrics, session, cafe.id, today)
    return ok(overview_gate.wrap(request, data))


@router.get("/trend")
async def trend(cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        return ok(await run(accounts_repo_sql.trend, session, cafe.id))


@router.get("/invoices")
async def list_invoices(cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        rows = await run(accounts_repo_sql.list_invoices, session, cafe.id)
    return ok([row.model_dump(mode="json") for row in rows])


@router.post("/invoices")
async def add_invoice(payload: InvoiceIn, cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        row = await run(accounts_repo_sql.add_invoice, session, cafe.id, payload)
    return ok(row.model_dump(mode="json"))


@router.get("/expenses")
async def list_expenses(cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        rows = await run(accounts_repo_sql.list_expenses, session, cafe.id)
    return ok([row.model_dump(mode="json") for row in rows])


@router.post("/expenses")
async def add_expense(payload: ExpenseIn, cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        row = await run(accounts_repo_sql.add_expense, session, cafe.id, payload)
    return ok(row.model_dump(mode="json"))


@router.get("/ledger")
async def list_ledger(cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        rows = await run(accounts_repo_sql.list_ledger, session, cafe.id)
    return ok([row.model_dump() for row in rows])


@router.post("/ledger")
async def add_ledger_account(
    payload: LedgerIn, cafe: CafeOut = Depends(accounts_gate)
) -> dict:
    async with get_session() as session:
        row = await run(accounts_repo_sql.add_ledger_account, session, cafe.id, payload)
    return ok(row.model_dump())


@router.get("/parties")
async def list_parties(cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        rows = await run(accounts_repo_sql.list_parties, session, cafe.id)
    return ok([row.model_dump() for row in rows])


@router.post("/parties")
async def add_party(payload: PartyIn, cafe: CafeOut = Depends(accounts_gate)) -> dict:
    async with get_session() as session:
        row = await run(accounts_repo_sql.add_party, session, cafe.id, payload)
    return ok(row.model_dump())
