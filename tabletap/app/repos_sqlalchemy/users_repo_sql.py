"""Account and super-admin allow-list queries."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import SuperAdmin, User
from ..schemas import Conflict


async def get_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.lower())
    )
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, email: str, password_hash: str) -> User:
    """Insert a user; raises ``Conflict`` when the email is taken."""

    if await get_by_email(session, email) is not None:
        raise Conflict("email already registered")
    user = User(email=email.lower(), password_hash=password_hash)
    session.add(user)
    await session.commit()
    return user


async def is_super_admin(session: AsyncSession, email: str | None) -> bool:
    if not email:
        return False
    found = await session.scalar(
        select(SuperAdmin.id).where(func.lower(SuperAdmin.email) == email.lower())
    )
    return found is not None


async def list_super_admins(session: AsyncSession) -> list[str]:
    result = await session.execute(select(SuperAdmin.email).order_by(SuperAdmin.email))
    return [row.email for row in result]


async def add_super_admin(session: AsyncSession, email: str) -> bool:
    """Add ``email`` to the allow-list; returns ``False`` if already present."""

    if await is_super_admin(session, email):
        return False
    session.add(SuperAdmin(email=email.lower()))
    await session.commit()
    return True
