"""
SQLAlchemy database models and configuration.

Architecture Decision: Why SQLAlchemy?
- Keeps the storage medium swappable (SQLite file today, any SQL server later)
- The task engine is synchronous, so a plain (non-async) engine is enough
- Whole task lists are stored as one JSON document per namespace; the domain
  layer owns the schema of that document, the database only owns the row
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker


# Base class for all models
class Base(DeclarativeBase):
    pass


class TaskListModel(Base):
    """One serialized task collection per namespace (e.g. per user)"""
    __tablename__ = "task_lists"

    namespace: Mapped[str] = mapped_column(String(200), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)


class DatabaseEngine:
    """
    Manages database connection and session lifecycle.
    """

    def __init__(self, db_url: str):
        self.engine = create_engine(db_url, echo=False)
        self.session_factory = sessionmaker(self.engine, class_=Session, expire_on_commit=False)

    def create_tables(self):
        """Create all tables in the database"""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session"""
        return self.session_factory()

    def dispose(self):
        self.engine.dispose()


def init_db(db_url: str, engine: Optional[DatabaseEngine] = None) -> DatabaseEngine:
    """Create (or reuse) an engine for db_url and make sure the tables exist"""
    engine = engine or DatabaseEngine(db_url)
    engine.create_tables()
    return engine
