"""Domain-Oriented Observability for the groups application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from groups.application.observability.activity_service_probe import (
    ActivityServiceProbe,
    DefaultActivityServiceProbe,
)
from groups.application.observability.group_service_probe import (
    DefaultGroupServiceProbe,
    GroupServiceProbe,
)

__all__ = [
    "ActivityServiceProbe",
    "DefaultActivityServiceProbe",
    "GroupServiceProbe",
    "DefaultGroupServiceProbe",
]
