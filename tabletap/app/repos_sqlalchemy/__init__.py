"""SQLAlchemy-backed repository implementations.

This module also exposes ``CafeGuard``, a tiny helper providing assertion
helpers to ensure that repository helpers only touch rows belonging to the
cafe they were asked about. Rows from another cafe are reported as missing
so that identifiers of other tenants cannot be probed.
"""

from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

M = TypeVar("M")


class CafeGuard:
    """Utility mixin providing cafe scoping assertions."""

    @staticmethod
    def assert_cafe(row: Any, cafe_id: str, what: str = "row") -> None:
        """Ensure ``row`` exists and belongs to ``cafe_id``.

        Raises
        ------
        AssertionError
            If ``cafe_id`` is blank.
        LookupError
            If ``row`` is missing or scoped to a different cafe.
        """

        if not cafe_id:
            raise AssertionError("cafe_id required")
        if row is None or getattr(row, "cafe_id", None) != cafe_id:
            raise LookupError(f"{what} not found")

    @staticmethod
    async def get_scoped(
        session: AsyncSession, model: type[M], row_id: str, cafe_id: str
    ) -> M:
        """Load ``model`` row ``row_id`` and assert it belongs to ``cafe_id``."""

        row = await session.get(model, row_id)
        CafeGuard.assert_cafe(row, cafe_id, model.__tablename__)  # type: ignore[attr-defined]
        return row  # type: ignore[return-value]


__all__ = ["CafeGuard"]
