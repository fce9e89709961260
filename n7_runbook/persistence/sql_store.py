"""
SQL-backed key-value store.

Keeps runbook progress in a single `kv_store` table so the runbook can share a
database with other tooling. Any SQLAlchemy URL works; SQLite is the default.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, LargeBinary, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

logger = logging.getLogger("n7-runbook.sql-store")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class KeyValueEntry(Base, TimestampMixin):
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    def __repr__(self):
        return f"<KeyValueEntry(key={self.key}, bytes={len(self.value)})>"


class SqlKeyValueStore:
    def __init__(self, url_or_engine):
        if isinstance(url_or_engine, Engine):
            self.engine = url_or_engine
        else:
            self.engine = create_engine(str(url_or_engine), future=True, pool_pre_ping=True)
        Base.metadata.create_all(self.engine)

    def read(self, key: str) -> Optional[bytes]:
        with Session(self.engine) as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None

    def write(self, key: str, value: bytes) -> None:
        with Session(self.engine) as session:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        logger.debug(f"Stored {len(value)} bytes under {key}")

    def close(self) -> None:
        self.engine.dispose()
