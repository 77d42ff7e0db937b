# core/db.py
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import DATABASE_URL
from core.errors import StoreError

# Disable check_same_thread only for SQLite
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, future=True, connect_args=connect_args)

# expire_on_commit=False keeps returned objects readable after commit()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)

Base = declarative_base()


def get_db():
    """Yield a SQLAlchemy session; used as a FastAPI dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit(db):
    """Commit the session, turning driver failures into StoreError."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError("Database error while saving changes") from exc
