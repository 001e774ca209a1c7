"""Extraction of tags from free-text record content."""

from .normalizer import TagNormalizer
from .validator import TagValidator


class TagParser:
    """Parser that turns record content into normalized tags.

    Every whitespace-separated token is a tag candidate. A token is validated
    before and after normalization and skipped silently when either check
    fails; the rest are deduplicated keeping the position of the first
    occurrence.

    Example:
        >>> TagParser().parse("Vue react JavaScript vue nodejs React")
        ['vue', 'react', 'javascript', 'nodejs']
    """

    def __init__(
        self,
        validator: TagValidator | None = None,
        normalizer: TagNormalizer | None = None,
    ):
        self.validator = validator or TagValidator()
        self.normalizer = normalizer or TagNormalizer()

    def parse(self, content: str) -> list[str]:
        """Parse content into an ordered list of unique normalized tags.

        Args:
            content: Raw record content

        Returns:
            Normalized tags in order of first appearance
        """
        if not content or not content.strip():
            return []

        tags: list[str] = []
        seen: set[str] = set()

        # str.split() without arguments splits on runs of Unicode whitespace
        for token in content.split():
            if not self.validator.validate(token).is_valid:
                continue

            normalized = self.normalizer.normalize(token)
            # a stray combining mark normalizes to "", NFKC can produce ":"
            if not self.validator.is_valid(normalized):
                continue

            if normalized not in seen:
                seen.add(normalized)
                tags.append(normalized)

        return tags
