from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from regdesk.core.config import settings

# SQLite needs cross-thread access for the FastAPI threadpool.
connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

# The engine is the entry point to the database and owns the connection pool.
engine = create_engine(
    settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args
)

# SessionLocal is a factory for creating new Session objects.
# One session is used per request or per background task.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        # Always release the session, even if the endpoint raised.
        db.close()
