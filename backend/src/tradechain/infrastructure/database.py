"""
Database configuration and session management with SQLAlchemy.

Uses async SQLAlchemy for non-blocking database operations.
Letters, participants and every emitted event are persisted so the
full history of a letter remains available for audit.

Design Decisions:
- AsyncSession for non-blocking operations
- Nested letter fields (rules, approval, evidence) stored as JSON
- Event records are append-only
- Session-per-operation pattern
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class BankRecord(Base):
    __tablename__ = "banks"

    bank_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256))


class PersonRecord(Base):
    """Customers and bank employees, distinguished by ``kind``."""
    __tablename__ = "persons"

    person_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(32), index=True)
    name: Mapped[str] = mapped_column(String(256))
    last_name: Mapped[str | None] = mapped_column(String(256))
    company_name: Mapped[str | None] = mapped_column(String(256))
    bank_id: Mapped[str] = mapped_column(String(64), ForeignKey("banks.bank_id"))


class LetterRecord(Base):
    """
    Current state of a letter of credit.

    One row per letter, overwritten on every successful action.
    """
    __tablename__ = "letters_of_credit"

    letter_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(32), index=True)

    applicant_json: Mapped[dict] = mapped_column(JSON)
    beneficiary_json: Mapped[dict] = mapped_column(JSON)
    issuing_bank: Mapped[str] = mapped_column(String(64), ForeignKey("banks.bank_id"))
    exporting_bank: Mapped[str] = mapped_column(String(64), ForeignKey("banks.bank_id"))

    rules_json: Mapped[list] = mapped_column(JSON, default=list)
    product_details_json: Mapped[dict] = mapped_column(JSON)
    evidence_json: Mapped[list] = mapped_column(JSON, default=list)
    approval_json: Mapped[list] = mapped_column(JSON, default=list)
    close_reason: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class LetterEventRecord(Base):
    """Audit record of a domain event emitted for a letter."""
    __tablename__ = "letter_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    letter_id: Mapped[str] = mapped_column(String(64), index=True)
    event_type: Mapped[str] = mapped_column(String(64))
    payload_json: Mapped[dict] = mapped_column(JSON, default=dict)


class Database:
    """
    Owns the async engine and session factory for one connection URL.

    Usage:
        db = Database("sqlite+aiosqlite:///./tradechain.db")
        await db.init()
        async with db.session() as session:
            session.add(record)
            await session.commit()
        await db.close()
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the async database engine."""
        if self._engine is None:
            self._engine = create_async_engine(self.url, echo=self.echo)
            logger.info(f"Database engine created for {self._engine.url.render_as_string(hide_password=True)}")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory for creating database sessions."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, rolling back if the block raises."""
        session = self.session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def init(self) -> None:
        """
        Initialize database tables.

        Call this on application startup to ensure tables exist.
        In production, use Alembic migrations instead.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables initialized")

    async def close(self) -> None:
        """Close database connections on shutdown."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
        logger.info("Database connections closed")
