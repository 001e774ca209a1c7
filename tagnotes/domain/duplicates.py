"""Duplicate detection by exact tag-set equality."""

from collections.abc import Iterable

from .record import Record


class RecordDuplicateChecker:
    """
    Две записи — дубликаты, если их множества тегов совпадают.

    Порядок тегов и контент не важны. Две записи без тегов
    тоже считаются дубликатами друг друга.
    """

    def is_duplicate(self, first: Record | None, second: Record | None) -> bool:
        if not isinstance(first, Record) or not isinstance(second, Record):
            return False
        return first.has_same_tag_set(second)

    def find_duplicates_in(
        self, target: Record | None, candidates: Iterable[Record | None] | None
    ) -> list[Record]:
        """
        Найти дубликаты target среди candidates.

        Args:
            target: Проверяемая запись
            candidates: Список записей (None и не-Record пропускаются)

        Returns:
            Записи с тем же набором тегов, кроме самой target
        """
        if not isinstance(target, Record) or candidates is None:
            return []

        duplicates = []
        for candidate in candidates:
            if not isinstance(candidate, Record):
                continue
            if candidate == target:
                continue
            if self.is_duplicate(target, candidate):
                duplicates.append(candidate)
        return duplicates
