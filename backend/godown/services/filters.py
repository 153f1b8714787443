"""
Item filter parsing and application.

The same filter set drives the hierarchy query (per location level), the
item listing and the filter-options lookup.
"""

import json
import math
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query

from godown.core.exceptions import InvalidInputError
from godown.models.item import Item, ItemStatus

ATTRIBUTE_KEY_RE = re.compile(r"^[A-Za-z0-9_]+$")


def validate_id(value: str, label: str = "Godown ID") -> str:
    """
    Reject ids that are not hyphenated UUID strings.

    The id is returned exactly as given, so an explicit id is stored and
    echoed back in the caller's letter case.
    """
    try:
        canonical = str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        raise InvalidInputError(f"Invalid {label} format.")
    if canonical != str(value).lower():
        raise InvalidInputError(f"Invalid {label} format.")
    return str(value)


def split_multi(values: Optional[Iterable[str]]) -> List[str]:
    """
    Flatten repeated and comma-separated query values.

    ``["a,b", "c"]`` -> ``["a", "b", "c"]``; blanks are dropped.
    """
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    result = []
    for raw in values:
        for part in str(raw).split(","):
            part = part.strip()
            if part and part not in result:
                result.append(part)
    return result


def _parse_number(raw: Optional[str], label: str, cast):
    if raw is None or str(raw).strip() == "":
        return None
    try:
        value = cast(str(raw).strip())
    except ValueError:
        raise InvalidInputError(f"{label} must be a number.")
    if math.isnan(value) or math.isinf(value):
        raise InvalidInputError(f"{label} must be a number.")
    if value < 0:
        raise InvalidInputError(f"{label} cannot be negative.")
    return value


@dataclass
class ItemFilter:
    """Active item filters. Empty lists and ``None`` bounds are inactive."""

    statuses: List[ItemStatus] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    brands: List[str] = field(default_factory=list)
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_quantity: Optional[int] = None
    max_quantity: Optional[int] = None
    search: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_params(
        cls,
        status: Optional[Iterable[str]] = None,
        category: Optional[Iterable[str]] = None,
        brand: Optional[Iterable[str]] = None,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        min_quantity: Optional[str] = None,
        max_quantity: Optional[str] = None,
        search: Optional[str] = None,
        attributes: Optional[str] = None,
    ) -> "ItemFilter":
        """Build a filter from raw query-string values, validating as it goes."""
        statuses = []
        for raw in split_multi(status):
            try:
                statuses.append(ItemStatus(raw))
            except ValueError:
                raise InvalidInputError(
                    "Status must be either 'in_stock' or 'out_of_stock'."
                )

        item_filter = cls(
            statuses=statuses,
            categories=split_multi(category),
            brands=split_multi(brand),
            min_price=_parse_number(min_price, "minPrice", float),
            max_price=_parse_number(max_price, "maxPrice", float),
            min_quantity=_parse_number(min_quantity, "minQuantity", int),
            max_quantity=_parse_number(max_quantity, "maxQuantity", int),
            search=search.strip() if search and search.strip() else None,
            attributes=parse_attributes(attributes),
        )

        if (
            item_filter.min_price is not None
            and item_filter.max_price is not None
            and item_filter.min_price > item_filter.max_price
        ):
            raise InvalidInputError("minPrice cannot be greater than maxPrice.")
        if (
            item_filter.min_quantity is not None
            and item_filter.max_quantity is not None
            and item_filter.min_quantity > item_filter.max_quantity
        ):
            raise InvalidInputError("minQuantity cannot be greater than maxQuantity.")
        return item_filter

    @property
    def is_empty(self) -> bool:
        return not (
            self.statuses
            or self.categories
            or self.brands
            or self.min_price is not None
            or self.max_price is not None
            or self.min_quantity is not None
            or self.max_quantity is not None
            or self.search
            or self.attributes
        )

    def apply(self, query: Query) -> Query:
        """Narrow an ``Item`` query by every active filter."""
        if self.statuses:
            query = query.filter(Item.status.in_(self.statuses))
        if self.categories:
            query = query.filter(Item.category.in_(self.categories))
        if self.brands:
            query = query.filter(Item.brand.in_(self.brands))
        if self.min_price is not None:
            query = query.filter(Item.price >= self.min_price)
        if self.max_price is not None:
            query = query.filter(Item.price <= self.max_price)
        if self.min_quantity is not None:
            query = query.filter(Item.quantity >= self.min_quantity)
        if self.max_quantity is not None:
            query = query.filter(Item.quantity <= self.max_quantity)
        if self.search:
            # % and _ in the search text match literally
            escaped = (
                self.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            query = query.filter(Item.name.ilike(f"%{escaped}%", escape="\\"))
        for key, value in self.attributes.items():
            query = query.filter(func.json_extract(Item.attributes, f"$.{key}") == value)
        return query


def parse_attributes(raw: Optional[str]) -> Dict[str, Any]:
    """Parse the JSON object given as the ``attributes`` query parameter."""
    if not raw:
        return {}
    try:
        attrs = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidInputError("Invalid attributes format.")
    if not isinstance(attrs, dict):
        raise InvalidInputError("Invalid attributes format.")
    for key, value in attrs.items():
        if not ATTRIBUTE_KEY_RE.match(key):
            raise InvalidInputError(f"Invalid attribute name: {key!r}.")
        if isinstance(value, (dict, list)):
            raise InvalidInputError(f"Attribute {key!r} must be a scalar value.")
    return attrs
