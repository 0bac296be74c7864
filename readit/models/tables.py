"""SQLAlchemy ORM table definitions."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from readit.models.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Subreddit(Base):
    """A community that posts are submitted to."""
    __tablename__ = "subreddits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)


class Post(Base):
    """A submitted post.

    Vote and comment counters are maintained by the vote/comment
    controllers; the listing engine only reads them.
    """
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subreddit_name: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("subreddits.name"), nullable=True, index=True
    )
    author: Mapped[str] = mapped_column(String(255), default="[deleted]")
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, default="")
    up_votes: Mapped[int] = mapped_column(Integer, default=0)
    down_votes: Mapped[int] = mapped_column(Integer, default=0)
    num_comments: Mapped[int] = mapped_column(Integer, default=0)
    created_utc: Mapped[float] = mapped_column(Float, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=None)

    # Relationships
    comments: Mapped[list["Comment"]] = relationship(back_populates="post")


class Comment(Base):
    """A comment on a post, or a reply to another comment."""
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    parent_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("comments.id"), nullable=True, default=None)
    level: Mapped[int] = mapped_column(Integer, default=0)
    author: Mapped[str] = mapped_column(String(255), default="[deleted]")
    content: Mapped[str] = mapped_column(Text, default="")
    up_votes: Mapped[int] = mapped_column(Integer, default=0)
    down_votes: Mapped[int] = mapped_column(Integer, default=0)
    num_replies: Mapped[int] = mapped_column(Integer, default=0)
    created_utc: Mapped[float] = mapped_column(Float, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=None)

    # Relationships
    post: Mapped[Post] = relationship(back_populates="comments")
