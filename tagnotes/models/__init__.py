"""SQLAlchemy models for Tagged Notes."""

from .base import Base, TimestampMixin, as_utc, utc_now
from .record import RecordModel
from .record_tag import record_tags
from .tag import TagModel

__all__ = [
    "Base",
    "TimestampMixin",
    "RecordModel",
    "TagModel",
    "record_tags",
    "utc_now",
    "as_utc",
]
