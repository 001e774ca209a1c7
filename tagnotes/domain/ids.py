"""Identifier types for domain entities."""

import uuid
from typing import NewType

TagId = NewType("TagId", str)
RecordId = NewType("RecordId", str)


def generate_id() -> str:
    """Generate a random 128-bit identifier (UUID4 string)."""
    return str(uuid.uuid4())


def is_valid_id(value: str) -> bool:
    """Check that value is a well-formed UUID string."""
    try:
        uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return False
    return True
