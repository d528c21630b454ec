"""Seed helpers shared by the API and repository tests."""

from tabletap.app.auth import create_session_token
from tabletap.app.db import get_session
from tabletap.app.repos_sqlalchemy import cafes_repo_sql, menu_repo_sql, users_repo_sql
from tabletap.app.schemas import CafeCreate, MenuItemIn, SessionUser


def auth_headers(user: SessionUser) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(user)}"}


async def make_owner(email: str = "owner@cafe.test", name: str = "Corner Cafe"):
    """Create a user and their cafe; returns ``(user, cafe)``."""

    async with get_session() as session:
        user = await users_repo_sql.create_user(session, email, "not-a-real-hash")
        cafe = await cafes_repo_sql.create(session, user.id, CafeCreate(name=name))
    return SessionUser(id=user.id, email=user.email), cafe


async def make_item(cafe_id: str, name: str = "Latte", price: float = 4.5, **fields):
    async with get_session() as session:
        return await menu_repo_sql.create_item(
            session, cafe_id, MenuItemIn(name=name, price=price, **fields)
        )
