"""Application services for the groups bounded context.

Application services orchestrate domain aggregates, repositories, and
other collaborators to fulfill use cases. They are the "front door" to
the groups context.
"""

from groups.application.services.activity_service import ActivityService
from groups.application.services.group_service import GroupService

__all__ = [
    "ActivityService",
    "GroupService",
]
