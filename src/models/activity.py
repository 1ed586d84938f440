import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.session import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    icon_id: Mapped[str | None] = mapped_column(String(64))
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    # "venue, city"; city may also be stored explicitly.
    location: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    city: Mapped[str | None] = mapped_column(String(255))

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    age_group: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    age_min: Mapped[int | None]
    age_max: Mapped[int | None]
    group_name: Mapped[str | None] = mapped_column(String(255))

    schedule: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    instructor: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64))
    details_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    ai_summary: Mapped[str | None] = mapped_column(Text)
    ai_tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
