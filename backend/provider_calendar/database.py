from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from .config import settings
from .models.generated import Base

# check_same_thread=False: SQLite connections are shared across FastAPI worker threads
engine = create_engine(
    settings.resolved_database_url,
    connect_args={"check_same_thread": False}
    if settings.resolved_database_url.startswith("sqlite")
    else {},
)


@event.listens_for(engine, "connect")
def enable_sqlite_fk(dbapi_connection, _):
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db(bind=None) -> None:
    """Create missing tables."""
    Base.metadata.create_all(bind=bind or engine)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
