import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Point the app at a throwaway SQLite file and keep the LLM offline before src is imported.
_db_dir = Path(tempfile.mkdtemp(prefix="activity-directory-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_db_dir / 'catalog.db'}"
os.environ["LLM_ENABLED"] = "false"
os.environ["LLM_API_KEY"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from src.db.session import Base, SessionLocal, create_tables, engine  # noqa: E402
from src.main import app  # noqa: E402
from src.search.types import ActivityRecord, CategoryRecord  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema():
    create_tables()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def categories() -> list[CategoryRecord]:
    return [
        CategoryRecord(id="sport", name="ספורט"),
        CategoryRecord(id="golden_age", name="גיל הזהב"),
        CategoryRecord(id="art", name="אומנות"),
    ]


@pytest.fixture
def basketball() -> ActivityRecord:
    return ActivityRecord(
        id="a1",
        title="כדורסל לילדים",
        category="ספורט",
        description="אימון שבועי במגרש המקורה",
        location="מרכז יבור, הרצליה",
        age_group="גילאי 6-9",
        price=150,
        views=10,
    )


@pytest.fixture
def yoga() -> ActivityRecord:
    return ActivityRecord(
        id="a2",
        title="יוגה לגיל הזהב",
        category="גיל הזהב",
        description="תרגול עדין ונשימות",
        location="מרכז נינא, הרצליה",
        age_group="60 ומעלה",
        price=80,
        views=30,
    )
