"""Domain-Oriented Observability for groups infrastructure.

Probes for repository operations following Domain-Oriented Observability patterns.
"""

from groups.infrastructure.observability.repository_probe import (
    DefaultDiscussionStoreProbe,
    DefaultGroupRepositoryProbe,
    DiscussionStoreProbe,
    GroupRepositoryProbe,
)

__all__ = [
    "DiscussionStoreProbe",
    "DefaultDiscussionStoreProbe",
    "GroupRepositoryProbe",
    "DefaultGroupRepositoryProbe",
]
