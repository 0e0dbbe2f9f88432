"""SQLAlchemy ORM model for the Record entity."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vault.infrastructure.database.base import Base


class RecordModel(Base):
    """ORM model: maps to the 'records' table.

    Timestamps are written by the record store; the table sets no defaults.
    """

    __tablename__ = "records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_records_created", "created_at", "id"),
        Index("ix_records_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<RecordModel(id={self.id}, name='{self.name}')>"
