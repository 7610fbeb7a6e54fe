"""Abstract repository interface for short-form training history."""

from abc import ABC, abstractmethod

from tubestudio.models import ShortsTrainingEntry


class ShortsHistoryRepository(ABC):
    """Storage contract for analyzed past short-form videos.

    The shorts coach depends on this interface, not on a concrete
    backend, so tests can run against an in-memory database.
    """

    @abstractmethod
    def save(self, entry: ShortsTrainingEntry) -> None:
        """Persist an entry. Upserts if the entry id already exists."""

    @abstractmethod
    def get(self, entry_id: str) -> ShortsTrainingEntry | None:
        """Retrieve an entry by id. Returns None if not found."""

    @abstractmethod
    def list_all(self) -> list[ShortsTrainingEntry]:
        """List all entries, newest first."""

    @abstractmethod
    def top_performers(self, limit: int = 5) -> list[ShortsTrainingEntry]:
        """Return the highest-scoring entries by weighted engagement."""

    @abstractmethod
    def delete(self, entry_id: str) -> None:
        """Remove an entry. No-op if it does not exist."""
