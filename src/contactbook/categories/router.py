"""
Category API router (read-only reference data).
"""

from collections import defaultdict
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.categories.repository import CategoryRepository, SubcategoryRepository
from contactbook.categories.schemas import CategoryResponse, SubcategoryResponse
from contactbook.shared.database import get_db_session
from contactbook.shared.rate_limit import rate_limit_queries

router = APIRouter(prefix="/api/category", tags=["categories"])


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
    description="Get every category together with its dictionary subcategories.",
    dependencies=[Depends(rate_limit_queries)],
)
async def list_categories(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> list[CategoryResponse]:
    """List the category taxonomy for form pickers."""
    categories = await CategoryRepository(session).get_all()
    subcategories = await SubcategoryRepository(session).get_all()

    by_category: dict[int, list[SubcategoryResponse]] = defaultdict(list)
    for subcategory in subcategories:
        by_category[subcategory.category_id].append(
            SubcategoryResponse.model_validate(subcategory)
        )

    return [
        CategoryResponse(
            id=category.id,
            name=category.name,
            subcategories=by_category.get(category.id, []),
        )
        for category in categories
    ]
