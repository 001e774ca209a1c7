"""Record model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class RecordModel(Base, TimestampMixin):
    """Record row.

    Tag membership lives in the record_tags junction table and is written
    with Core statements by SqlRecordRepository, so there is no ORM
    collection to keep in sync.
    """

    __tablename__ = "records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"<RecordModel(id={self.id}, content='{preview}')>"
