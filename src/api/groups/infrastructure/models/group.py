"""SQLAlchemy ORM model for the groups table.

Stores group attributes and the single-level parent link. Memberships live
in their own table and are loaded by the repository.
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from infrastructure.database.models import Base, TimestampMixin


class GroupModel(Base, TimestampMixin):
    """ORM model for groups table.

    Foreign Key Constraints:
    - parent_id references groups.id with RESTRICT delete
      A parent cannot be deleted while subgroups still point at it

    The two-level hierarchy rule (a parent never has a parent) is enforced
    by the domain, not by the database.
    """

    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(250), nullable=False)
    description: Mapped[str | None] = mapped_column(String(250), nullable=True)
    creator_id: Mapped[str | None] = mapped_column(
        String(26), nullable=True, index=True
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    viewable_by: Mapped[str] = mapped_column(String(32), nullable=False)
    members_invitable_by: Mapped[str] = mapped_column(String(32), nullable=False)
    max_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cannot_contribute: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    beta_features: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sectors_metric: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    parent = relationship(
        "GroupModel",
        remote_side="GroupModel.id",
        back_populates="subgroups",
    )
    # Children are never rewritten by the ORM; the RESTRICT foreign key
    # rejects deleting a parent that still has subgroups.
    subgroups = relationship(
        "GroupModel",
        back_populates="parent",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<GroupModel(id={self.id}, name={self.name}, parent_id={self.parent_id})>"
        )
