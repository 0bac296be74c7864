"""Listing routes: ranked, cursor-paginated JSON feeds.

Query parameters:
    after / before: Only one should be specified. An opaque cursor taken
        from a previous response, used as the anchor point of the slice.
    limit: Maximum number of items desired (default 25, maximum 100).
        Out-of-range values are clamped rather than rejected.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from readit.config import get_settings
from readit.models.database import get_db
from readit.models.schemas import DEFAULT_LIMIT, ListingMode, ListingRequest, ListingResponse
from readit.services.content_store import (
    CommentStore,
    PostDirectory,
    PostStore,
    SubredditDirectory,
)
from readit.services.paginator import ListingPaginator
from readit.services.ranking import Ranker, RankingConfig

router = APIRouter(tags=["Listing"])


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_ranker() -> Ranker:
    """FastAPI dependency building a Ranker from current settings."""
    return Ranker(RankingConfig.from_settings(get_settings()))


def get_post_paginator(
    db: Session = Depends(get_db),
    ranker: Ranker = Depends(get_ranker),
) -> ListingPaginator:
    """FastAPI dependency: paginator over posts."""
    return ListingPaginator(PostStore(db), ranker)


def get_comment_paginator(
    db: Session = Depends(get_db),
    ranker: Ranker = Depends(get_ranker),
) -> ListingPaginator:
    """FastAPI dependency: paginator over a post's comments."""
    return ListingPaginator(CommentStore(db), ranker)


def _serve_listing(
    paginator: ListingPaginator,
    mode: ListingMode,
    scope: Optional[str],
    after: Optional[str],
    before: Optional[str],
    limit: int,
) -> ListingResponse:
    """Run one listing request and shape the response body.

    Args:
        paginator: Paginator bound to the right content store.
        mode: Listing mode.
        scope: Subreddit name, post id, or None for the global listing.
        after: Cursor to page forward from.
        before: Cursor to page backward from.
        limit: Requested page size (clamped by ListingRequest).

    Returns:
        ListingResponse with before/after cursors and children.
    """
    request = ListingRequest(
        mode=mode,
        scope=scope,
        after=after,
        before=before,
        limit=limit,
    )
    page = paginator.paginate(request)
    return ListingResponse.from_page(page)


# ---------------------------------------------------------------------------
# Site-wide listings
# ---------------------------------------------------------------------------

@router.get("/best", response_model=ListingResponse)
async def best(
    after: Optional[str] = Query(None),
    before: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    paginator: ListingPaginator = Depends(get_post_paginator),
) -> ListingResponse:
    """Best posts: Wilson lower bound of the up-vote ratio."""
    return _serve_listing(paginator, ListingMode.BEST, None, after, before, limit)


@router.get("/hot", response_model=ListingResponse)
async def hot(
    after: Optional[str] = Query(None),
    before: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    paginator: ListingPaginator = Depends(get_post_paginator),
) -> ListingResponse:
    """Hot posts: net votes decayed by age."""
    return _serve_listing(paginator, ListingMode.HOT, None, after, before, limit)


@router.get("/new", response_model=ListingResponse)
async def new(
    after: Optional[str] = Query(None),
    before: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    paginator: ListingPaginator = Depends(get_post_paginator),
) -> ListingResponse:
    """Newest posts first."""
    return _serve_listing(paginator, ListingMode.NEW, None, after, before, limit)


@router.get("/top", response_model=ListingResponse)
async def top(
    after: Optional[str] = Query(None),
    before: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    paginator: ListingPaginator = Depends(get_post_paginator),
) -> ListingResponse:
    """Posts with the highest net votes."""
    return _serve_listing(paginator, ListingMode.TOP, None, after, before, limit)


# ---------------------------------------------------------------------------
# Scoped listings
# ---------------------------------------------------------------------------

@router.get("/r/{subreddit}", response_model=ListingResponse)
@router.get("/r/{subreddit}/{mode}", response_model=ListingResponse)
async def subreddit_listing(
    subreddit: str,
    mode: ListingMode = ListingMode.HOT,
    after: Optional[str] = Query(None),
    before: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    db: Session = Depends(get_db),
    paginator: ListingPaginator = Depends(get_post_paginator),
) -> ListingResponse:
    """Posts in one subreddit. ``/r/{subreddit}`` alone lists hot posts.

    Args:
        subreddit: Subreddit name from the path.
        mode: Listing mode from the path.
        after: Forward cursor.
        before: Backward cursor.
        limit: Page size.
        db: Database session.
        paginator: Post paginator.

    Raises:
        ScopeNotFound: If the subreddit does not exist (404).
    """
    SubredditDirectory(db).require(subreddit)
    return _serve_listing(paginator, mode, subreddit, after, before, limit)


@router.get("/comments/{post_id}", response_model=ListingResponse)
@router.get("/comments/{post_id}/{mode}", response_model=ListingResponse)
async def comment_listing(
    post_id: int,
    mode: ListingMode = ListingMode.BEST,
    after: Optional[str] = Query(None),
    before: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    db: Session = Depends(get_db),
    paginator: ListingPaginator = Depends(get_comment_paginator),
) -> ListingResponse:
    """Comments on a post. ``/comments/{post_id}`` alone lists best comments.

    Raises:
        ScopeNotFound: If the post does not exist or was deleted (404).
    """
    PostDirectory(db).require(post_id)
    return _serve_listing(paginator, mode, str(post_id), after, before, limit)
