from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ActivityBase(BaseModel):
    title: str
    category: str = ""
    description: str = ""
    image_url: str = ""
    location: str = ""
    city: str | None = None
    price: Decimal = Field(default=Decimal(0), ge=0)
    age_group: str = ""
    age_min: int | None = Field(default=None, ge=0)
    age_max: int | None = Field(default=None, ge=0)
    group_name: str | None = None
    schedule: str = ""
    instructor: str | None = None
    phone: str | None = None
    details_url: str = ""
    is_visible: bool = True
    ai_summary: str | None = None
    ai_tags: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class ActivityCreate(ActivityBase):
    pass


class ActivityImport(ActivityBase):
    id: str | None = None
    views: int = 0


class ActivityUpdate(BaseModel):
    title: str | None = None
    category: str | None = None
    description: str | None = None
    image_url: str | None = None
    location: str | None = None
    city: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    age_group: str | None = None
    age_min: int | None = Field(default=None, ge=0)
    age_max: int | None = Field(default=None, ge=0)
    group_name: str | None = None
    schedule: str | None = None
    instructor: str | None = None
    phone: str | None = None
    details_url: str | None = None
    is_visible: bool | None = None
    ai_summary: str | None = None
    ai_tags: list[str] | None = None
    tags: list[str] | None = None


class ActivityRead(ActivityBase):
    id: str
    views: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ActivityBatchUpdate(BaseModel):
    ids: list[str] = Field(min_length=1)
    updates: ActivityUpdate


class ActivityBatchDelete(BaseModel):
    ids: list[str] = Field(min_length=1)


class ActivityImportRequest(BaseModel):
    activities: list[ActivityImport]


class BatchResult(BaseModel):
    affected: int


class ActivityFilterOptions(BaseModel):
    venues: list[str]
    cities: list[str]


class CategoryRead(BaseModel):
    id: str
    name: str
    icon_id: str | None
    is_visible: bool
    sort_order: int

    model_config = {"from_attributes": True}


class CategorySave(BaseModel):
    id: str | None = Field(default=None, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    icon_id: str | None = Field(default=None, max_length=64)
    is_visible: bool = True
    sort_order: int | None = Field(default=None, ge=0)

    model_config = {"str_strip_whitespace": True}


class CategoryReorder(BaseModel):
    ids: list[str] = Field(min_length=1)


class KeywordExpansionRequest(BaseModel):
    term: str = Field(max_length=200)


class KeywordExpansionResponse(BaseModel):
    keywords: list[str]
    available: bool
    message: str | None = None
