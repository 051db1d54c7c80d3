from typing import Iterable, Iterator


class ChapterIdSet:
    """Set of chapter ids behind a narrow add/discard/toggle interface."""

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(ids)

    def __contains__(self, chapter_id: object) -> bool:
        return chapter_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, chapter_id: str) -> None:
        self._ids.add(chapter_id)

    def discard(self, chapter_id: str) -> None:
        self._ids.discard(chapter_id)

    def toggle(self, chapter_id: str) -> bool:
        """Flip membership; returns the new membership."""
        if chapter_id in self._ids:
            self._ids.discard(chapter_id)
            return False
        self._ids.add(chapter_id)
        return True

    def replace(self, ids: Iterable[str]) -> None:
        self._ids = set(ids)

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._ids)
