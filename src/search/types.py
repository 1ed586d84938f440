from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(slots=True)
class ActivityRecord:
    id: str
    title: str = ""
    category: str = ""
    description: str = ""
    location: str = ""
    city: str | None = None
    age_group: str = ""
    age_min: int | None = None
    age_max: int | None = None
    price: Decimal | int | float | None = 0
    instructor: str | None = None
    ai_summary: str | None = None
    ai_tags: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_visible: bool = True
    views: int = 0


@dataclass(slots=True, frozen=True)
class CategoryRecord:
    id: str
    name: str
