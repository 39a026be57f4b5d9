"""SQLAlchemy ORM model for the memberships table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin

MEMBERSHIP_UNIQUE_CONSTRAINT = "uq_memberships_group_user"


class MembershipModel(Base, TimestampMixin):
    """ORM model for memberships table.

    One row per (group, user). The unique constraint is what turns a lost
    race between two writers into a DuplicateMembershipError.

    Foreign Key Constraint:
    - group_id references groups.id with RESTRICT delete
      The repository deletes memberships before their group
    """

    __tablename__ = "memberships"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    group_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    access_level: Mapped[str] = mapped_column(String(16), nullable=False)
    invitation_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    inviter_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    group_last_viewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name=MEMBERSHIP_UNIQUE_CONSTRAINT),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<MembershipModel(id={self.id}, group_id={self.group_id}, "
            f"user_id={self.user_id}, access_level={self.access_level})>"
        )
