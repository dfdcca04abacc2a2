"""Protocol repositories (the service only knows these, the SQLAlchemy versions live in sql_repository.py)"""

from typing import Protocol
from uuid import UUID

from chessduel.core.models import MatchModel


class MatchRepository(Protocol):
    """Persistence layer orchestration"""

    def get_match(self, match_id: UUID) -> MatchModel | None:
        """Get match by ID, if record exists."""
        ...

    def create_match(self, match: MatchModel) -> tuple[MatchModel, UUID]:
        """Store new match and return the stored data + newly created match ID."""
        ...

    def update_match(self, match_id: UUID, match: MatchModel) -> MatchModel | None:
        """Add new info to existing record."""
        ...

    def list_matches(self) -> list[tuple[UUID, MatchModel]]:
        """All recorded matches, oldest first."""
        ...

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        """Remove a match's record."""
        ...


class CredentialStore(Protocol):
    """Keeps the provider API key between sessions."""

    def save(self, name: str, secret: str) -> None: ...

    def load(self, name: str) -> str | None: ...

    def clear(self, name: str) -> None: ...
