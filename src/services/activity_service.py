import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from src.models.activity import Activity, Category
from src.schemas.activity import ActivityCreate, ActivityImport, ActivityUpdate, CategorySave
from src.search.criteria import FilterCriteria
from src.search.engine import filter_activities, filter_options, sort_activities
from src.search.types import ActivityRecord, CategoryRecord

logger = logging.getLogger(__name__)

_UPSERT_BATCH_SIZE = 400

DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("sport", "ספורט"),
    ("pool", "בריכה"),
    ("art", "אומנות"),
    ("music", "מוזיקה"),
    ("golden_age", "גיל הזהב"),
    ("enrichment", "העשרה ולימוד"),
    ("community", "קהילה"),
    ("tech", "טכנולוגיה"),
)


class ActivityNotFoundError(LookupError):
    pass


class CategoryNotFoundError(LookupError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _chunked(values: list, size: int) -> list[list]:
    return [values[i : i + size] for i in range(0, len(values), size)]


def _update_values(updates: ActivityUpdate) -> dict:
    # Explicit nulls only clear nullable columns.
    values = updates.model_dump(exclude_unset=True)
    return {
        key: value
        for key, value in values.items()
        if value is not None or Activity.__table__.columns[key].nullable
    }


def to_record(activity: Activity) -> ActivityRecord:
    return ActivityRecord(
        id=activity.id,
        title=activity.title or "",
        category=activity.category or "",
        description=activity.description or "",
        location=activity.location or "",
        city=activity.city,
        age_group=activity.age_group or "",
        age_min=activity.age_min,
        age_max=activity.age_max,
        price=activity.price,
        instructor=activity.instructor,
        ai_summary=activity.ai_summary,
        ai_tags=list(activity.ai_tags or []),
        tags=list(activity.tags or []),
        is_visible=activity.is_visible is not False,
        views=activity.views or 0,
    )


def list_activities(db: Session) -> list[Activity]:
    stmt = select(Activity).order_by(Activity.created_at.asc(), Activity.id.asc())
    return list(db.scalars(stmt))


def list_categories(db: Session, include_hidden: bool = True) -> list[Category]:
    categories = list(db.scalars(select(Category).order_by(Category.sort_order.asc(), Category.name.asc())))
    if categories:
        return categories if include_hidden else [c for c in categories if c.is_visible]

    logger.info("categories table empty, seeding %d defaults", len(DEFAULT_CATEGORIES))
    seeded = [
        Category(id=category_id, name=name, icon_id=category_id, is_visible=True, sort_order=order)
        for order, (category_id, name) in enumerate(DEFAULT_CATEGORIES)
    ]
    db.add_all(seeded)
    db.commit()
    return seeded


def save_category(db: Session, payload: CategorySave) -> Category:
    """Create or replace a category. New ones without an order go last."""
    category_id = (payload.id or "").strip() or f"cat_{uuid.uuid4().hex[:12]}"
    category = db.get(Category, category_id)
    sort_order = payload.sort_order
    if sort_order is None:
        if category is not None:
            sort_order = category.sort_order
        else:
            sort_order = (db.scalar(select(func.max(Category.sort_order))) or 0) + 1
    if category is None:
        category = Category(id=category_id)
        db.add(category)

    category.name = payload.name.strip()
    category.icon_id = payload.icon_id
    category.is_visible = payload.is_visible
    category.sort_order = sort_order
    db.commit()
    db.refresh(category)
    logger.info("saved category id=%s name=%r", category.id, category.name)
    return category


def delete_category(db: Session, category_id: str) -> None:
    # Activities keep their category name; it just stops resolving to an id.
    category = db.get(Category, category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)
    db.delete(category)
    db.commit()
    logger.info("deleted category id=%s", category_id)


def reorder_categories(db: Session, category_ids: list[str]) -> list[Category]:
    """Move the given categories to the front, in order; the rest keep their relative order."""
    current = list_categories(db)
    by_id = {c.id: c for c in current}
    ordered = list(dict.fromkeys(category_ids))
    moved = set(ordered)
    missing = [category_id for category_id in ordered if category_id not in by_id]
    if missing:
        raise CategoryNotFoundError(", ".join(missing))

    front = [by_id[category_id] for category_id in ordered]
    rest = [c for c in current if c.id not in moved]
    for position, category in enumerate(front + rest, start=1):
        category.sort_order = position
    db.commit()
    return list_categories(db)


def search_activities(db: Session, criteria: FilterCriteria) -> list[Activity]:
    rows = [row for row in list_activities(db) if row.is_visible is not False]
    rows_by_id = {row.id: row for row in rows}
    categories = [CategoryRecord(id=c.id, name=c.name) for c in list_categories(db)]

    matched = filter_activities([to_record(row) for row in rows], criteria, categories)
    ordered = sort_activities(matched, criteria.sort)
    return [rows_by_id[record.id] for record in ordered]


def get_filter_options(db: Session) -> dict[str, list[str]]:
    records = [to_record(row) for row in list_activities(db) if row.is_visible is not False]
    cities, venues = filter_options(records)
    return {"cities": cities, "venues": venues}


def get_activity(db: Session, activity_id: str) -> Activity:
    activity = db.get(Activity, activity_id)
    if activity is None:
        raise ActivityNotFoundError(activity_id)
    return activity


def add_activity(db: Session, payload: ActivityCreate) -> Activity:
    now = _utcnow()
    activity = Activity(**payload.model_dump(), views=0, created_at=now, updated_at=now)
    db.add(activity)
    db.commit()
    db.refresh(activity)
    logger.info("created activity id=%s title=%r", activity.id, activity.title)
    return activity


def update_activity(db: Session, activity_id: str, updates: ActivityUpdate) -> Activity:
    activity = get_activity(db, activity_id)
    for key, value in _update_values(updates).items():
        setattr(activity, key, value)
    activity.updated_at = _utcnow()
    db.commit()
    db.refresh(activity)
    return activity


def delete_activity(db: Session, activity_id: str) -> None:
    activity = get_activity(db, activity_id)
    db.delete(activity)
    db.commit()
    logger.info("deleted activity id=%s", activity_id)


def update_activities_batch(db: Session, activity_ids: list[str], updates: ActivityUpdate) -> int:
    values = _update_values(updates)
    if not values:
        return 0
    values["updated_at"] = _utcnow()

    affected = 0
    for ids_chunk in _chunked(list(dict.fromkeys(activity_ids)), _UPSERT_BATCH_SIZE):
        result = db.execute(update(Activity).where(Activity.id.in_(ids_chunk)).values(**values))
        affected += result.rowcount or 0
    db.commit()
    logger.info("batch updated %d activities fields=%s", affected, sorted(values))
    return affected


def delete_activities_batch(db: Session, activity_ids: list[str]) -> int:
    affected = 0
    for ids_chunk in _chunked(list(dict.fromkeys(activity_ids)), _UPSERT_BATCH_SIZE):
        result = db.execute(delete(Activity).where(Activity.id.in_(ids_chunk)))
        affected += result.rowcount or 0
    db.commit()
    logger.info("batch deleted %d activities", affected)
    return affected


def delete_all_activities(db: Session) -> int:
    deleted = db.execute(delete(Activity)).rowcount or 0
    db.commit()
    logger.info("deleted all activities count=%d", deleted)
    return deleted


def import_activities(db: Session, items: list[ActivityImport]) -> int:
    """Upsert imported rows keyed by ``id``; rows without an id are inserted fresh."""
    now = _utcnow()
    written = 0
    for chunk in _chunked(list(items), _UPSERT_BATCH_SIZE):
        ids = [item.id.strip() for item in chunk if item.id and item.id.strip()]
        existing_by_id = {a.id: a for a in db.scalars(select(Activity).where(Activity.id.in_(ids)))} if ids else {}

        for item in chunk:
            data = item.model_dump(exclude={"id"})
            activity_id = item.id.strip() if item.id and item.id.strip() else None
            current = existing_by_id.get(activity_id) if activity_id else None
            if current is None:
                activity = Activity(**data, created_at=now, updated_at=now)
                if activity_id:
                    activity.id = activity_id
                    existing_by_id[activity_id] = activity
                db.add(activity)
            else:
                for key, value in data.items():
                    setattr(current, key, value)
                current.updated_at = now
            written += 1
        db.commit()

    logger.info("imported %d activities", written)
    return written


def increment_activity_view(db: Session, activity_id: str) -> Activity:
    activity = get_activity(db, activity_id)
    activity.views = (activity.views or 0) + 1
    db.commit()
    db.refresh(activity)
    return activity
