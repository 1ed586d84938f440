from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from src.core.config import settings


class Base(DeclarativeBase):
    pass


def _engine_kwargs(dsn: str) -> dict:
    if dsn.startswith("sqlite"):
        # TestClient and uvicorn workers touch the connection from other threads.
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_dsn, **_engine_kwargs(settings.database_dsn))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def create_tables() -> None:
    # Models register themselves on Base.metadata at import time.
    import src.models.activity  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
