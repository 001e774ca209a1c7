"""Record-Tag junction table."""

from sqlalchemy import Column, ForeignKey, Index, String, Table

from .base import Base

# Many-to-many junction table for records and tags
record_tags = Table(
    "record_tags",
    Base.metadata,
    Column("record_id", String(36), ForeignKey("records.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    # orphan lookup and tag -> records scans
    Index("ix_record_tags_tag_id", "tag_id"),
)
