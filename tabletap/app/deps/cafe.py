"""Dependency helpers for cafe (tenant) resolution."""

from __future__ import annotations

from fastapi import Depends, HTTPException

from ..auth import get_current_user
from ..db import get_session
from ..repos_sqlalchemy import cafes_repo_sql
from ..schemas import CafeOut, SessionUser


async def get_owned_cafe(
    cafe_id: str, user: SessionUser = Depends(get_current_user)
) -> CafeOut:
    """Return the cafe named in the path if the caller owns it.

    Raises:
        HTTPException: 404 when the cafe does not exist, 403 when it belongs
            to someone else.
    """
    async with get_session() as session:
        cafe = await cafes_repo_sql.get(session, cafe_id)
    if cafe is None:
        raise HTTPException(404, "Cafe not found")
    if cafe.owner_id != user.id:
        raise HTTPException(403, "Not your cafe")
    return cafe
