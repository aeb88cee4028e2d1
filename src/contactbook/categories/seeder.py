"""
Reference-data seeding for the category taxonomy.

Runs at startup; inserts the default dictionary only when the category
table is empty. IDs are fixed because the web client relies on them
(1 = business with dictionary subcategories, 3 = other with a free-text
label).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.categories.models import Category, Subcategory
from contactbook.categories.repository import CategoryRepository, SubcategoryRepository
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)

BUSINESS_CATEGORY_ID = 1
PRIVATE_CATEGORY_ID = 2
OTHER_CATEGORY_ID = 3

DEFAULT_CATEGORIES: dict[int, str] = {
    BUSINESS_CATEGORY_ID: "Służbowy",
    PRIVATE_CATEGORY_ID: "Prywatny",
    OTHER_CATEGORY_ID: "Inny",
}

DEFAULT_SUBCATEGORIES: list[tuple[int, str, int]] = [
    (1, "szef", BUSINESS_CATEGORY_ID),
    (2, "współpracownik", BUSINESS_CATEGORY_ID),
    (3, "klient", BUSINESS_CATEGORY_ID),
]


async def seed_reference_data(session: AsyncSession) -> bool:
    """Insert default categories and subcategories if none exist.

    Returns:
        True when data was inserted, False when the table was already seeded.
    """
    categories = CategoryRepository(session)
    if await categories.count() > 0:
        logger.debug("Reference data already present; skipping seed")
        return False

    await categories.add_all(
        [Category(id=category_id, name=name) for category_id, name in DEFAULT_CATEGORIES.items()]
    )
    await SubcategoryRepository(session).add_all(
        [
            Subcategory(id=subcategory_id, name=name, category_id=category_id)
            for subcategory_id, name, category_id in DEFAULT_SUBCATEGORIES
        ]
    )

    logger.info(
        "Reference data seeded",
        extra={
            "categories": len(DEFAULT_CATEGORIES),
            "subcategories": len(DEFAULT_SUBCATEGORIES),
        },
    )
    return True
