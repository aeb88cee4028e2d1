"""
Pydantic schemas for category reference data.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SubcategoryResponse(BaseModel):
    """Schema for a dictionary subcategory."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    category_id: int


class CategoryResponse(BaseModel):
    """Schema for a category with its subcategories."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    subcategories: list[SubcategoryResponse] = Field(default_factory=list)
