"""Domain-Oriented Observability for the groups domain layer.

Probes for domain aggregate operations following Domain-Oriented Observability patterns.
"""

from groups.domain.observability.group_probe import (
    DefaultGroupProbe,
    GroupProbe,
)

__all__ = [
    "DefaultGroupProbe",
    "GroupProbe",
]
