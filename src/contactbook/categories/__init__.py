"""
Category/subcategory reference data.
"""

from contactbook.categories.models import Category, Subcategory

__all__ = ["Category", "Subcategory"]
