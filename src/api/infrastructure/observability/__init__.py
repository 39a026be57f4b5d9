"""Probes for the shared database layer.

Bounded contexts keep their own probes next to their code; this package
only observes the engine and sessions handed out by infrastructure.database.
"""

from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)

__all__ = [
    "ConnectionProbe",
    "DefaultConnectionProbe",
]
