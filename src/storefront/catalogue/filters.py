"""Product list filters.

Listing requests are described by a small set of filter variants rather than
ad-hoc dicts, then translated into Protean query lookups:

- ``Equals(field, value)``           → ``field=value``
- ``Range(field, minimum, maximum)`` → ``field__gte`` / ``field__lte``
- ``Contains(fields, term)``         → OR of ``field__icontains=term``
- ``SortBy(field, descending)``      → ``order_by("-field")``
"""

from dataclasses import dataclass

from protean.utils.query import Q

SORTABLE_FIELDS = {
    "price": "price",
    "name": "name",
    "created_at": "created_at",
    "createdAt": "created_at",
}

SEARCHABLE_FIELDS = ("name", "description", "sku")

DEFAULT_SORT = "-created_at"


@dataclass(frozen=True)
class Equals:
    field: str
    value: object


@dataclass(frozen=True)
class Range:
    field: str
    minimum: float | None = None
    maximum: float | None = None


@dataclass(frozen=True)
class Contains:
    fields: tuple[str, ...]
    term: str


@dataclass(frozen=True)
class SortBy:
    field: str
    descending: bool = False

    @classmethod
    def parse(cls, expression: str | None) -> "SortBy":
        """Parse ``"-price"`` style sort expressions.

        Unknown fields fall back to newest first.
        """
        expression = expression or DEFAULT_SORT
        descending = expression.startswith("-")
        name = expression[1:] if descending else expression
        if name not in SORTABLE_FIELDS:
            return cls(field="created_at", descending=True)
        return cls(field=SORTABLE_FIELDS[name], descending=descending)

    def expression(self) -> str:
        return f"-{self.field}" if self.descending else self.field


def product_filters(search=None, category=None, min_price=None, max_price=None, is_active=None) -> list:
    """Build the filter list for a product listing request."""
    filters = []
    if search:
        filters.append(Contains(fields=SEARCHABLE_FIELDS, term=search))
    if category:
        filters.append(Equals(field="category_id", value=category))
    if min_price is not None or max_price is not None:
        filters.append(Range(field="price", minimum=min_price, maximum=max_price))
    if is_active is not None:
        filters.append(Equals(field="is_active", value=is_active))
    return filters


def apply_filters(queryset, filters, sort: SortBy | None = None):
    """Translate ``filters`` and ``sort`` onto a Protean queryset."""
    for item in filters:
        if isinstance(item, Equals):
            queryset = queryset.filter(**{item.field: item.value})
        elif isinstance(item, Range):
            if item.minimum is not None:
                queryset = queryset.filter(**{f"{item.field}__gte": item.minimum})
            if item.maximum is not None:
                queryset = queryset.filter(**{f"{item.field}__lte": item.maximum})
        elif isinstance(item, Contains):
            condition = None
            for field_name in item.fields:
                clause = Q(**{f"{field_name}__icontains": item.term})
                condition = clause if condition is None else condition | clause
            if condition is not None:
                queryset = queryset.filter(condition)
        else:
            raise TypeError(f"Unsupported filter: {item!r}")

    sort = sort or SortBy.parse(DEFAULT_SORT)
    return queryset.order_by(sort.expression())
