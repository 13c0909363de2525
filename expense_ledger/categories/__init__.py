"""Category reference data package."""

from expense_ledger.categories.catalog import (
    DEFAULT_CATEGORIES,
    FALLBACK_CATEGORY_COLOR,
    UNRECOGNIZED_CATEGORY_ID,
    UNRECOGNIZED_CATEGORY_NAME,
    CategoryCatalog,
    default_catalog,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "FALLBACK_CATEGORY_COLOR",
    "UNRECOGNIZED_CATEGORY_ID",
    "UNRECOGNIZED_CATEGORY_NAME",
    "CategoryCatalog",
    "default_catalog",
]
