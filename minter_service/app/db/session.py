from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from minter_service.app.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # TestClient and background tasks touch the connection from other threads
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 1800,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
