import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

_NON_DIGITS_RE = re.compile(r"[^0-9]")


class SortOption(str, Enum):
    popularity = "popularity"
    price_asc = "price-asc"
    price_desc = "price-desc"
    alphabetical = "alphabetical"
    alphabetical_desc = "alphabetical-desc"


def sanitize_digits(value: object) -> str:
    """Strip everything except ASCII digits, the same way the filter inputs do."""
    if value is None:
        return ""
    return _NON_DIGITS_RE.sub("", str(value))


def parse_bound(value: object) -> int | None:
    """Read a user-entered numeric filter field; empty or digit-free input means unset."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    digits = sanitize_digits(value)
    return int(digits) if digits else None


def _clean_set(values: Iterable[str] | None) -> frozenset[str]:
    if not values:
        return frozenset()
    return frozenset(v.strip() for v in values if isinstance(v, str) and v.strip())


@dataclass(frozen=True)
class FilterCriteria:
    """Snapshot of every active filter widget.

    ``age`` selects the single viewer-age check; when it is unset,
    ``age_min``/``age_max`` select the desired-range overlap check.
    """

    search_term: str = ""
    expanded_keywords: tuple[str, ...] = ()
    category_ids: frozenset[str] = field(default_factory=frozenset)
    cities: frozenset[str] = field(default_factory=frozenset)
    venues: frozenset[str] = field(default_factory=frozenset)
    age: int | None = None
    age_min: int | None = None
    age_max: int | None = None
    price_min: int | None = None
    price_max: int | None = None
    sort: SortOption = SortOption.popularity

    @classmethod
    def from_raw(
        cls,
        *,
        search_term: str | None = None,
        expanded_keywords: Iterable[str] | None = None,
        category_ids: Iterable[str] | None = None,
        cities: Iterable[str] | None = None,
        venues: Iterable[str] | None = None,
        age: object = None,
        age_min: object = None,
        age_max: object = None,
        price_min: object = None,
        price_max: object = None,
        sort: SortOption | str | None = None,
    ) -> "FilterCriteria":
        try:
            sort_option = SortOption(sort) if sort else SortOption.popularity
        except ValueError:
            sort_option = SortOption.popularity
        keywords = tuple(k for k in (expanded_keywords or ()) if isinstance(k, str) and k.strip())
        return cls(
            search_term=search_term or "",
            expanded_keywords=keywords,
            category_ids=_clean_set(category_ids),
            cities=_clean_set(cities),
            venues=_clean_set(venues),
            age=parse_bound(age),
            age_min=parse_bound(age_min),
            age_max=parse_bound(age_max),
            price_min=parse_bound(price_min),
            price_max=parse_bound(price_max),
            sort=sort_option,
        )

    @property
    def is_empty(self) -> bool:
        return (
            not self.search_term.strip()
            and not self.category_ids
            and not self.cities
            and not self.venues
            and self.age is None
            and self.age_min is None
            and self.age_max is None
            and self.price_min is None
            and self.price_max is None
        )
