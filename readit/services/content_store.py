"""Content stores: read-only candidate sources for the listing engine.

Stores turn ORM rows into ListableItem snapshots. They never mutate vote
or comment counters and always exclude soft-deleted rows. Scope
resolution (does this subreddit / post exist?) lives here too, so the
HTTP layer can reject unknown scopes with a 404 before paginating.
"""

import logging
from typing import Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from readit.models.schemas import ItemKind, ListableItem, ListingMode
from readit.models.tables import Comment, Post, Subreddit
from readit.services.errors import ScopeNotFound

logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    """Anything that can supply listing candidates for a scope."""

    def fetch_candidates(
        self, scope: Optional[str], mode: ListingMode
    ) -> Sequence[ListableItem]:
        ...


def post_to_item(post: Post) -> ListableItem:
    """Snapshot a Post row as a ListableItem."""
    return ListableItem(
        id=post.id,
        kind=ItemKind.POST,
        created_utc=post.created_utc,
        up_votes=post.up_votes or 0,
        down_votes=post.down_votes or 0,
        num_comments=post.num_comments or 0,
        scope=post.subreddit_name,
        deleted=post.deleted_at is not None,
        author=post.author or "[deleted]",
        title=post.title or "",
        content=post.content or "",
    )


def comment_to_item(comment: Comment) -> ListableItem:
    """Snapshot a Comment row as a ListableItem scoped to its post."""
    return ListableItem(
        id=comment.id,
        kind=ItemKind.COMMENT,
        created_utc=comment.created_utc,
        up_votes=comment.up_votes or 0,
        down_votes=comment.down_votes or 0,
        num_comments=comment.num_replies or 0,
        scope=str(comment.post_id),
        deleted=comment.deleted_at is not None,
        author=comment.author or "[deleted]",
        content=comment.content or "",
        parent_id=comment.parent_id,
    )


class PostStore:
    """Posts, either site-wide (scope None) or within one subreddit."""

    def __init__(self, db_session: Session) -> None:
        """Initialize the store.

        Args:
            db_session: SQLAlchemy database session.
        """
        self._db = db_session

    def fetch_candidates(
        self, scope: Optional[str], mode: ListingMode
    ) -> list[ListableItem]:
        """Load every non-deleted post in scope.

        Args:
            scope: Subreddit name, or None for the global listing.
            mode: Listing mode (ordering is left to the ranker).

        Returns:
            List of ListableItem snapshots.
        """
        stmt = select(Post).where(Post.deleted_at.is_(None))
        if scope is not None:
            stmt = stmt.where(Post.subreddit_name == scope)
        rows = self._db.scalars(stmt.order_by(Post.id)).all()
        logger.debug(f"Loaded {len(rows)} post candidates for scope={scope!r} mode={mode.value}")
        return [post_to_item(row) for row in rows]


class CommentStore:
    """Comments on a single post; scope is the post id as a string."""

    def __init__(self, db_session: Session) -> None:
        self._db = db_session

    def fetch_candidates(
        self, scope: Optional[str], mode: ListingMode
    ) -> list[ListableItem]:
        """Load every non-deleted comment on the post named by ``scope``.

        An empty or non-numeric scope yields no candidates.
        """
        if scope is None or not scope.isdecimal():
            return []
        stmt = (
            select(Comment)
            .where(Comment.post_id == int(scope))
            .where(Comment.deleted_at.is_(None))
            .order_by(Comment.id)
        )
        rows = self._db.scalars(stmt).all()
        logger.debug(f"Loaded {len(rows)} comment candidates for post {scope} mode={mode.value}")
        return [comment_to_item(row) for row in rows]


class SubredditDirectory:
    """Looks up subreddits by name for scope validation."""

    def __init__(self, db_session: Session) -> None:
        self._db = db_session

    def require(self, name: str) -> Subreddit:
        """Return the named subreddit or raise.

        Args:
            name: Subreddit name (without the r/ prefix).

        Returns:
            The Subreddit row.

        Raises:
            ScopeNotFound: If no subreddit has that name.
        """
        subreddit = self._db.scalars(
            select(Subreddit).where(Subreddit.name == name)
        ).first()
        if subreddit is None:
            raise ScopeNotFound("Subreddit not found!")
        return subreddit


class PostDirectory:
    """Looks up live posts by id for comment-listing scope validation."""

    def __init__(self, db_session: Session) -> None:
        self._db = db_session

    def require(self, post_id: int) -> Post:
        """Return the post with ``post_id`` unless it is missing or deleted.

        Raises:
            ScopeNotFound: If the post does not exist or was deleted.
        """
        post = self._db.get(Post, post_id)
        if post is None or post.deleted_at is not None:
            raise ScopeNotFound("Post not found!")
        return post
