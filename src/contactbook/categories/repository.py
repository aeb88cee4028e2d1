"""
Category and subcategory repositories.
"""

from typing import Protocol, Sequence

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.categories.models import Category, Subcategory
from contactbook.shared.database import id_in_range


class CategoryRepositoryProtocol(Protocol):
    """Protocol for category repository operations."""

    async def exists(self, category_id: int) -> bool: ...

    async def get_all(self) -> Sequence[Category]: ...


class SubcategoryRepositoryProtocol(Protocol):
    """Protocol for subcategory repository operations."""

    async def exists_for_category(self, subcategory_id: int, category_id: int) -> bool: ...

    async def get_by_category_id(self, category_id: int) -> Sequence[Subcategory]: ...


class CategoryRepository:
    """Repository for category reads."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists(self, category_id: int) -> bool:
        """Check whether a category with this ID exists."""
        if not id_in_range(category_id):
            return False
        stmt = select(exists().where(Category.id == category_id))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def get_all(self) -> Sequence[Category]:
        """Get all categories ordered by ID."""
        result = await self._session.execute(select(Category).order_by(Category.id))
        return result.scalars().all()

    async def count(self) -> int:
        """Count stored categories."""
        result = await self._session.execute(select(func.count(Category.id)))
        count = result.scalar()
        return count if count is not None else 0

    async def add_all(self, categories: list[Category]) -> list[Category]:
        """Persist new categories and assign their IDs."""
        self._session.add_all(categories)
        await self._session.flush()
        return categories


class SubcategoryRepository:
    """Repository for subcategory reads."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists_for_category(self, subcategory_id: int, category_id: int) -> bool:
        """Check that a subcategory exists and belongs to the given category."""
        if not (id_in_range(subcategory_id) and id_in_range(category_id)):
            return False
        stmt = select(
            exists().where(
                Subcategory.id == subcategory_id,
                Subcategory.category_id == category_id,
            )
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def get_by_category_id(self, category_id: int) -> Sequence[Subcategory]:
        """Get the subcategories of one category ordered by ID."""
        stmt = (
            select(Subcategory)
            .where(Subcategory.category_id == category_id)
            .order_by(Subcategory.id)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def get_all(self) -> Sequence[Subcategory]:
        result = await self._session.execute(select(Subcategory).order_by(Subcategory.id))
        return result.scalars().all()

    async def add_all(self, subcategories: list[Subcategory]) -> list[Subcategory]:
        self._session.add_all(subcategories)
        await self._session.flush()
        return subcategories
