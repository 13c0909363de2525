"""
Category Catalog

The fixed set of spending categories. Loaded once at startup and never
edited by the user; expenses reference categories by id only.
"""

from typing import Iterable, Iterator, Optional

from expense_ledger.models.expense import CategoryDefinition


UNRECOGNIZED_CATEGORY_ID = "unrecognized"
UNRECOGNIZED_CATEGORY_NAME = "Unrecognized"
FALLBACK_CATEGORY_COLOR = "#A0AEC0"


DEFAULT_CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(id="food", name="Food & Dining", icon="utensils", color="#F687B3"),
    CategoryDefinition(id="transport", name="Transportation", icon="car", color="#5A67D8"),
    CategoryDefinition(id="shopping", name="Shopping", icon="shopping-bag", color="#68D391"),
    CategoryDefinition(id="entertainment", name="Entertainment", icon="film", color="#F6E05E"),
    CategoryDefinition(id="housing", name="Housing", icon="home", color="#FC8181"),
    CategoryDefinition(id="utilities", name="Utilities", icon="zap", color="#4FD1C5"),
    CategoryDefinition(id="healthcare", name="Healthcare", icon="heart", color="#F56565"),
    CategoryDefinition(id="personal", name="Personal", icon="user", color="#9F7AEA"),
    CategoryDefinition(id="education", name="Education", icon="book", color="#ED8936"),
    CategoryDefinition(id="other", name="Other", icon="more-horizontal", color="#A0AEC0"),
)


class CategoryCatalog:
    """
    Ordered, read-only collection of CategoryDefinition values.

    Iteration follows definition order, which is also the tie-break
    order for category totals.
    """

    def __init__(self, categories: Iterable[CategoryDefinition]):
        self._categories = tuple(categories)
        self._by_id: dict[str, CategoryDefinition] = {}
        for category in self._categories:
            if category.id in self._by_id:
                raise ValueError(f"Duplicate category id: {category.id}")
            self._by_id[category.id] = category

    def __iter__(self) -> Iterator[CategoryDefinition]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def get(self, category_id: str) -> Optional[CategoryDefinition]:
        return self._by_id.get(category_id)

    def ids(self) -> list[str]:
        return [category.id for category in self._categories]


def default_catalog() -> CategoryCatalog:
    """Catalog built from DEFAULT_CATEGORIES."""
    return CategoryCatalog(DEFAULT_CATEGORIES)
