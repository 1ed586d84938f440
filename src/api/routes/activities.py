from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.db.session import get_db
from src.schemas.activity import (
    ActivityBatchDelete,
    ActivityBatchUpdate,
    ActivityCreate,
    ActivityFilterOptions,
    ActivityImportRequest,
    ActivityRead,
    ActivityUpdate,
    BatchResult,
    CategoryRead,
    CategoryReorder,
    CategorySave,
)
from src.search.criteria import FilterCriteria, SortOption
from src.services import activity_service
from src.services.activity_service import ActivityNotFoundError, CategoryNotFoundError

router = APIRouter(tags=["activities"])


def _not_found(activity_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Activity {activity_id} not found")


@router.get("/activities", response_model=list[ActivityRead])
def get_activities(
    q: str | None = Query(default=None, max_length=200),
    keyword: list[str] | None = Query(default=None),
    category: list[str] | None = Query(default=None),
    city: list[str] | None = Query(default=None),
    venue: list[str] | None = Query(default=None),
    age: str | None = None,
    age_min: str | None = None,
    age_max: str | None = None,
    price_min: str | None = None,
    price_max: str | None = None,
    sort: SortOption = SortOption.popularity,
    db: Session = Depends(get_db),
) -> list[ActivityRead]:
    # Numeric fields arrive as free text and are sanitized, never rejected.
    criteria = FilterCriteria.from_raw(
        search_term=q,
        expanded_keywords=keyword,
        category_ids=category,
        cities=city,
        venues=venue,
        age=age,
        age_min=age_min,
        age_max=age_max,
        price_min=price_min,
        price_max=price_max,
        sort=sort,
    )
    activities = activity_service.search_activities(db, criteria)
    return [ActivityRead.model_validate(activity) for activity in activities]


@router.get("/activities/filter-options", response_model=ActivityFilterOptions)
def get_activity_filter_options(
    db: Session = Depends(get_db),
) -> ActivityFilterOptions:
    options = activity_service.get_filter_options(db)
    return ActivityFilterOptions(
        venues=options["venues"],
        cities=options["cities"],
    )


@router.post("/activities/batch-update", response_model=BatchResult)
def batch_update_activities(payload: ActivityBatchUpdate, db: Session = Depends(get_db)) -> BatchResult:
    affected = activity_service.update_activities_batch(db, payload.ids, payload.updates)
    return BatchResult(affected=affected)


@router.post("/activities/batch-delete", response_model=BatchResult)
def batch_delete_activities(payload: ActivityBatchDelete, db: Session = Depends(get_db)) -> BatchResult:
    affected = activity_service.delete_activities_batch(db, payload.ids)
    return BatchResult(affected=affected)


@router.post("/activities/import", response_model=BatchResult)
def import_activities(payload: ActivityImportRequest, db: Session = Depends(get_db)) -> BatchResult:
    written = activity_service.import_activities(db, payload.activities)
    return BatchResult(affected=written)


@router.post("/activities", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
def create_activity(payload: ActivityCreate, db: Session = Depends(get_db)) -> ActivityRead:
    return ActivityRead.model_validate(activity_service.add_activity(db, payload))


@router.get("/activities/{activity_id}", response_model=ActivityRead)
def get_activity(activity_id: str, db: Session = Depends(get_db)) -> ActivityRead:
    try:
        return ActivityRead.model_validate(activity_service.get_activity(db, activity_id))
    except ActivityNotFoundError as exc:
        raise _not_found(activity_id) from exc


@router.patch("/activities/{activity_id}", response_model=ActivityRead)
def patch_activity(activity_id: str, payload: ActivityUpdate, db: Session = Depends(get_db)) -> ActivityRead:
    try:
        return ActivityRead.model_validate(activity_service.update_activity(db, activity_id, payload))
    except ActivityNotFoundError as exc:
        raise _not_found(activity_id) from exc


@router.delete("/activities/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_activity(activity_id: str, db: Session = Depends(get_db)) -> None:
    try:
        activity_service.delete_activity(db, activity_id)
    except ActivityNotFoundError as exc:
        raise _not_found(activity_id) from exc


@router.post("/activities/{activity_id}/view", response_model=ActivityRead)
def record_activity_view(activity_id: str, db: Session = Depends(get_db)) -> ActivityRead:
    try:
        return ActivityRead.model_validate(activity_service.increment_activity_view(db, activity_id))
    except ActivityNotFoundError as exc:
        raise _not_found(activity_id) from exc


@router.get("/categories", response_model=list[CategoryRead])
def get_categories(include_hidden: bool = False, db: Session = Depends(get_db)) -> list[CategoryRead]:
    categories = activity_service.list_categories(db, include_hidden=include_hidden)
    return [CategoryRead.model_validate(category) for category in categories]


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategorySave, db: Session = Depends(get_db)) -> CategoryRead:
    return CategoryRead.model_validate(activity_service.save_category(db, payload))


@router.post("/categories/reorder", response_model=list[CategoryRead])
def reorder_categories(payload: CategoryReorder, db: Session = Depends(get_db)) -> list[CategoryRead]:
    try:
        categories = activity_service.reorder_categories(db, payload.ids)
    except CategoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Category {exc} not found") from exc
    return [CategoryRead.model_validate(category) for category in categories]


@router.put("/categories/{category_id}", response_model=CategoryRead)
def put_category(category_id: str, payload: CategorySave, db: Session = Depends(get_db)) -> CategoryRead:
    saved = activity_service.save_category(db, payload.model_copy(update={"id": category_id}))
    return CategoryRead.model_validate(saved)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_category(category_id: str, db: Session = Depends(get_db)) -> None:
    try:
        activity_service.delete_category(db, category_id)
    except CategoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Category {category_id} not found") from exc
