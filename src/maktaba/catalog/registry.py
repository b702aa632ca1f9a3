"""Static description of the content categories and their projections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from maktaba.catalog.projections import ProjectionFn, project_book, project_fatwa, project_generic
from maktaba.errors import InvalidCategoryError


OrderKind = Literal["identifier", "timestamp"]

IDENTIFIER_ORDER_FIELD = "id"
GENERIC_SEARCH_FIELDS = ("title", "description", "prepared_by")
GENERIC_ORDER_FIELD = "extracted_at"


@dataclass(frozen=True, slots=True)
class CategoryDescriptor:
    name: str
    display_name: str
    search_fields: tuple[str, ...]
    order_field: str
    projection: ProjectionFn

    @property
    def order_kind(self) -> OrderKind:
        return "identifier" if self.order_field == IDENTIFIER_ORDER_FIELD else "timestamp"

    @property
    def is_identifier_ordered(self) -> bool:
        return self.order_kind == "identifier"


class CategoryRegistry:
    """Ordered, immutable lookup of category descriptors."""

    def __init__(self, descriptors: tuple[CategoryDescriptor, ...] | list[CategoryDescriptor]) -> None:
        self._descriptors = tuple(descriptors)
        self._by_name = {descriptor.name: descriptor for descriptor in self._descriptors}
        if len(self._by_name) != len(self._descriptors):
            raise ValueError("Category names must be unique")

    def descriptor_for(self, name: str | None) -> CategoryDescriptor:
        descriptor = self._by_name.get((name or "").strip())
        if descriptor is None:
            raise InvalidCategoryError(name or "")
        return descriptor

    def all_categories(self) -> tuple[CategoryDescriptor, ...]:
        return self._descriptors

    def names(self) -> tuple[str, ...]:
        return tuple(descriptor.name for descriptor in self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._descriptors)


def _generic(name: str) -> CategoryDescriptor:
    return CategoryDescriptor(
        name=name,
        display_name=name.capitalize(),
        search_fields=GENERIC_SEARCH_FIELDS,
        order_field=GENERIC_ORDER_FIELD,
        projection=project_generic,
    )


DEFAULT_REGISTRY = CategoryRegistry(
    (
        CategoryDescriptor(
            name="books",
            display_name="Books",
            search_fields=("name", "topics", "author"),
            order_field=IDENTIFIER_ORDER_FIELD,
            projection=project_book,
        ),
        _generic("articles"),
        CategoryDescriptor(
            name="fatwa",
            display_name="Fatwa",
            search_fields=("title", "question", "answer"),
            order_field=IDENTIFIER_ORDER_FIELD,
            projection=project_fatwa,
        ),
        _generic("audios"),
        _generic("videos"),
    )
)
