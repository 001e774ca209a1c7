"""Tag normalization: Unicode form, diacritics, case.

Produces the canonical key under which a tag is stored and looked up.
The pipeline is pure and idempotent: ``normalize(normalize(x)) == normalize(x)``.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Literal

UnicodeForm = Literal["NFC", "NFD", "NFKC", "NFKD"]

VALID_UNICODE_FORMS: tuple[str, ...] = ("NFC", "NFD", "NFKC", "NFKD")

# Combining Diacritical Marks block; marks of other scripts are kept
DIACRITIC_PATTERN = re.compile(r"[\u0300-\u036f]")

# Latin letters without a canonical decomposition
LATIN_FOLDS: dict[str, str] = {
    "Æ": "AE",
    "æ": "ae",
    "Œ": "OE",
    "œ": "oe",
    "Ø": "O",
    "ø": "o",
    "Ł": "L",
    "ł": "l",
    "Đ": "D",
    "đ": "d",
    "Ð": "D",
    "ð": "d",
    "Ħ": "H",
    "ħ": "h",
    "Ŧ": "T",
    "ŧ": "t",
    "ẞ": "SS",
    "ß": "ss",
}

_LATIN_FOLD_TABLE = str.maketrans(LATIN_FOLDS)


@dataclass(frozen=True)
class TagNormalizerConfig:
    """Toggles for each normalization stage."""

    lowercase: bool = True
    remove_diacritics: bool = True
    unicode_normalization: UnicodeForm | Literal[False] = "NFC"


def strip_diacritics(text: str) -> str:
    """Remove Latin diacritics from *text*.

    Decomposes to NFD, drops marks of the Combining Diacritical Marks block,
    folds letters such as "ł" and "ß" and recomposes to NFC, so "café" and
    "cafe\\u0301" both become "cafe" and "Łódź" becomes "Lodz".

    Args:
        text: Arbitrary Unicode string

    Returns:
        String without diacritics
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = DIACRITIC_PATTERN.sub("", decomposed).translate(_LATIN_FOLD_TABLE)
    return unicodedata.normalize("NFC", stripped)


class TagNormalizer:
    """Normalizer for tag values.

    Stages (each can be switched off through TagNormalizerConfig):
    1. Unicode normalization (NFC by default)
    2. Diacritic stripping
    3. Lowercasing

    Examples:
        "Café"      → "cafe"
        "JavaScript" → "javascript"
        "ÜBER"      → "uber"
    """

    def __init__(self, config: TagNormalizerConfig | None = None):
        self.config = config or TagNormalizerConfig()
        self._validate_config()

    def _validate_config(self) -> None:
        form = self.config.unicode_normalization
        if form is not False and form not in VALID_UNICODE_FORMS:
            raise ValueError(f"Invalid Unicode normalization form: {form!r}")

    def normalize(self, value: str) -> str:
        """Normalize a tag value.

        Args:
            value: Raw tag string

        Returns:
            Canonical tag string (empty input gives empty output)

        Raises:
            ValueError: If value is None
        """
        if value is None:
            raise ValueError("Input cannot be None")

        result = value

        if self.config.unicode_normalization is not False:
            result = unicodedata.normalize(self.config.unicode_normalization, result)

        if self.config.remove_diacritics:
            result = self._strip_diacritics(result)

        if self.config.lowercase:
            result = result.lower()
            # lowercasing can introduce combining marks ("İ" → "i̇")
            if self.config.remove_diacritics:
                result = self._strip_diacritics(result)

        return result

    def _strip_diacritics(self, text: str) -> str:
        result = strip_diacritics(text)
        # strip_diacritics recomposes to NFC
        if self.config.unicode_normalization not in (False, "NFC"):
            result = unicodedata.normalize(self.config.unicode_normalization, result)
        return result
