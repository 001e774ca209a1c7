"""Tag validation rules."""

import re
from dataclasses import dataclass, field

MAX_TAG_LENGTH = 100

# Order matters: errors are reported in this order
FORBIDDEN_CHARACTERS: tuple[str, ...] = ("{", "}", "[", "]", ":", ",", '"', "\\")

WHITESPACE_PATTERN = re.compile(r"\s")


def utf16_length(text: str) -> int:
    """Length in UTF-16 code units; characters outside the BMP count twice."""
    return len(text.encode("utf-16-le")) // 2


@dataclass
class TagValidationResult:
    """Outcome of validating a single tag."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    tag: str | None = None


class TagValidator:
    """Validator for tag strings.

    A tag is invalid when it is None or empty, longer than 100 UTF-16 units,
    contains any whitespace, or contains one of ``{ } [ ] : , " \\``.
    Every violation is reported; only None and empty short-circuit.
    """

    def validate(self, tag: str | None) -> TagValidationResult:
        """Validate a tag and collect all violations.

        Args:
            tag: Tag string to check

        Returns:
            TagValidationResult with is_valid flag and error messages
        """
        result = TagValidationResult(is_valid=True, tag=tag)

        if tag is None:
            result.is_valid = False
            result.errors.append("Tag cannot be None")
            return result

        if len(tag) == 0:
            result.is_valid = False
            result.errors.append("Tag cannot be empty")
            return result

        if utf16_length(tag) > MAX_TAG_LENGTH:
            result.is_valid = False
            result.errors.append(f"Tag cannot exceed {MAX_TAG_LENGTH} characters")

        if WHITESPACE_PATTERN.search(tag):
            result.is_valid = False
            result.errors.append("Tag cannot contain whitespace characters")

        for char in self._find_forbidden_characters(tag):
            result.is_valid = False
            result.errors.append(f"Tag contains forbidden character: {char}")

        return result

    def is_valid(self, tag: str | None) -> bool:
        return self.validate(tag).is_valid

    def _find_forbidden_characters(self, tag: str) -> list[str]:
        return [char for char in FORBIDDEN_CHARACTERS if char in tag]
