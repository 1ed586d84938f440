import math
from typing import Iterable, Sequence

from src.search.age_range import AgeRange, parse_age_range
from src.search.criteria import FilterCriteria, SortOption, parse_bound
from src.search.types import ActivityRecord, CategoryRecord


def split_location(location: str | None) -> tuple[str, str]:
    """Return ``(venue, city)`` from a "venue, city" string; missing parts are ''."""
    parts = [part.strip() for part in (location or "").split(",")]
    venue = parts[0] if parts else ""
    city = parts[1] if len(parts) > 1 else ""
    return venue, city


def activity_city(activity: ActivityRecord) -> str:
    explicit = (getattr(activity, "city", None) or "").strip()
    if explicit:
        return explicit
    return split_location(getattr(activity, "location", None))[1]


def activity_venue(activity: ActivityRecord) -> str:
    return split_location(getattr(activity, "location", None))[0]


def activity_age_range(activity: ActivityRecord) -> AgeRange | None:
    age_min = getattr(activity, "age_min", None)
    age_max = getattr(activity, "age_max", None)
    if isinstance(age_min, int) and isinstance(age_max, int):
        return AgeRange(age_min, age_max)
    return parse_age_range(getattr(activity, "age_group", None))


def _price_of(activity: ActivityRecord) -> float:
    try:
        price = float(getattr(activity, "price", 0) or 0)
    except (TypeError, ValueError):
        return 0.0
    return price if math.isfinite(price) else 0.0


def _category_ids_by_name(categories: Iterable[CategoryRecord]) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for category in categories or ():
        name = (getattr(category, "name", None) or "").strip()
        if name and name not in lookup:
            lookup[name] = str(getattr(category, "id", ""))
    return lookup


def _search_blobs(activity: ActivityRecord) -> list[str]:
    blobs = [
        getattr(activity, "title", None),
        getattr(activity, "description", None),
        getattr(activity, "category", None),
        getattr(activity, "ai_summary", None),
        getattr(activity, "instructor", None),
    ]
    for tag_field in ("tags", "ai_tags"):
        tags = getattr(activity, tag_field, None) or []
        blobs.extend(tags if isinstance(tags, (list, tuple)) else [])
    return [blob.lower() for blob in blobs if isinstance(blob, str) and blob]


def _search_keywords(criteria: FilterCriteria) -> list[str]:
    keywords = [criteria.search_term, *(criteria.expanded_keywords or ())]
    return [k.strip().lower() for k in keywords if isinstance(k, str) and k.strip()]


def matches_category(activity: ActivityRecord, selected_ids: frozenset[str], ids_by_name: dict[str, str]) -> bool:
    if not selected_ids:
        return True
    name = (getattr(activity, "category", None) or "").strip()
    return ids_by_name.get(name, "") in selected_ids


def matches_text(activity: ActivityRecord, search_term: str, keywords: list[str]) -> bool:
    if not (search_term or "").strip():
        return True
    blobs = _search_blobs(activity)
    return any(keyword in blob for keyword in keywords for blob in blobs)


def matches_city(activity: ActivityRecord, cities: frozenset[str]) -> bool:
    return not cities or activity_city(activity) in cities


def matches_venue(activity: ActivityRecord, venues: frozenset[str]) -> bool:
    return not venues or activity_venue(activity) in venues


def matches_viewer_age(activity: ActivityRecord, age: int | None) -> bool:
    if age is None:
        return True
    age_range = activity_age_range(activity)
    if age_range is None:
        return False
    return age_range.min <= age <= age_range.max


def matches_desired_age(activity: ActivityRecord, age_min: int | None, age_max: int | None) -> bool:
    if age_min is None and age_max is None:
        return True
    desired_min = age_min if age_min is not None else 0
    desired_max = age_max if age_max is not None else math.inf
    if desired_min > desired_max:
        return True
    age_range = activity_age_range(activity)
    if age_range is None:
        return False
    return age_range.max >= desired_min and age_range.min <= desired_max


def matches_price(activity: ActivityRecord, price_min: int | None, price_max: int | None) -> bool:
    if price_min is None and price_max is None:
        return True
    low = price_min if price_min is not None else 0
    high = price_max if price_max is not None else math.inf
    return low <= _price_of(activity) <= high


def filter_activities(
    activities: Sequence[ActivityRecord],
    criteria: FilterCriteria,
    categories: Sequence[CategoryRecord],
) -> list[ActivityRecord]:
    """Return the activities passing every active filter, in input order.

    Dimensions are ANDed; selections inside one dimension and the search
    keywords are ORed. Malformed records fall out as non-matches instead of
    raising.
    """
    ids_by_name = _category_ids_by_name(categories)
    keywords = _search_keywords(criteria)
    age = parse_bound(criteria.age)
    age_min = parse_bound(criteria.age_min)
    age_max = parse_bound(criteria.age_max)
    price_min = parse_bound(criteria.price_min)
    price_max = parse_bound(criteria.price_max)

    result: list[ActivityRecord] = []
    for activity in activities or ():
        if not matches_category(activity, criteria.category_ids, ids_by_name):
            continue
        if not matches_text(activity, criteria.search_term, keywords):
            continue
        if not matches_city(activity, criteria.cities):
            continue
        if not matches_venue(activity, criteria.venues):
            continue
        if age is not None:
            if not matches_viewer_age(activity, age):
                continue
        elif not matches_desired_age(activity, age_min, age_max):
            continue
        if not matches_price(activity, price_min, price_max):
            continue
        result.append(activity)
    return result


def sort_activities(activities: Sequence[ActivityRecord], sort: SortOption) -> list[ActivityRecord]:
    # sorted() is stable, so ties keep the catalog order.
    if sort == SortOption.price_asc:
        return sorted(activities, key=_price_of)
    if sort == SortOption.price_desc:
        return sorted(activities, key=_price_of, reverse=True)
    if sort == SortOption.alphabetical:
        return sorted(activities, key=lambda a: (getattr(a, "title", None) or "").casefold())
    if sort == SortOption.alphabetical_desc:
        return sorted(activities, key=lambda a: (getattr(a, "title", None) or "").casefold(), reverse=True)
    return sorted(activities, key=lambda a: getattr(a, "views", 0) or 0, reverse=True)


def filter_options(activities: Iterable[ActivityRecord]) -> tuple[list[str], list[str]]:
    """Distinct non-empty cities and venues, first-seen order."""
    cities: dict[str, None] = {}
    venues: dict[str, None] = {}
    for activity in activities:
        city = activity_city(activity)
        venue = activity_venue(activity)
        if city:
            cities.setdefault(city, None)
        if venue:
            venues.setdefault(venue, None)
    return list(cities), list(venues)
