from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


def make_engine(url: str):
    # SQLite connections are shared across FastAPI's worker threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def make_session_factory(engine):
    # One session per request
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base: all models inherit from this
Base = declarative_base()


def init_db(bind):
    """Create the tables (and the prospect name index) if they are missing."""
    import models  # noqa: F401  (registers the tables on Base.metadata)

    Base.metadata.create_all(bind=bind)


# Dependency to get database session
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
