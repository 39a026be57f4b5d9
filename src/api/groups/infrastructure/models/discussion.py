"""SQLAlchemy ORM models for discussions, comments and read logs.

Only the columns the unread activity computation and group deletion rely
on are mapped here.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class DiscussionModel(Base, TimestampMixin):
    """ORM model for discussions table."""

    __tablename__ = "discussions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    group_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    title: Mapped[str] = mapped_column(String(250), nullable=False)
    last_comment_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<DiscussionModel(id={self.id}, group_id={self.group_id})>"


class CommentModel(Base, TimestampMixin):
    """ORM model for comments table."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    discussion_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("discussions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str] = mapped_column(String(26), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<CommentModel(id={self.id}, discussion_id={self.discussion_id}, "
            f"author_id={self.author_id})>"
        )


class DiscussionReadLogModel(Base, TimestampMixin):
    """ORM model for discussion_read_logs table (one row per user and discussion)."""

    __tablename__ = "discussion_read_logs"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    discussion_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("discussions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    discussion_last_viewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "discussion_id", "user_id", name="uq_discussion_read_logs_discussion_user"
        ),
    )
