"""SQLAlchemy models for the local ledger."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class LedgerEntry(Base):
    """Transaction stored in the local ledger."""

    __tablename__ = "ledger_transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    budget_id = Column(String, nullable=False)
    account_id = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)  # milliunits
    payee_name = Column(String, nullable=True)
    memo = Column(String, nullable=True)
    cleared = Column(String(16), nullable=False)
    import_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_ledger_budget_account_date", "budget_id", "account_id", "date"),
        Index("ix_ledger_budget_import_id", "budget_id", "import_id"),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
