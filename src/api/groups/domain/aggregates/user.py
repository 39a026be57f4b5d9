"""User value for the groups context."""

from __future__ import annotations

from dataclasses import dataclass

from groups.domain.value_objects import UserId


@dataclass(frozen=True)
class User:
    """A person as reported by the user directory.

    Users live outside this bounded context; groups only reference them by
    id and read their email when resolving a contact address.
    """

    id: UserId
    name: str
    email: str

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.name})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)
