"""Cursor-based listing paginator.

Stateless per request: fetch candidates for the scope, rank them into a
strict total order, then cut a window out of that order relative to the
``after`` / ``before`` cursor. Windowing is positional on the
(sort key, id) pair a cursor carries, so a cursor whose item has since
been deleted still pages correctly. Hot scores decay with time, so hot
cursors also carry the instant the listing was ranked at and every later
page is ranked at that same instant.
"""

import logging
import time
from bisect import bisect_left, bisect_right
from typing import Optional

from readit.models.schemas import ListableItem, ListingMode, ListingRequest, Page
from readit.services.content_store import ContentStore
from readit.services.cursor import CursorPosition, decode_cursor, encode_cursor
from readit.services.errors import BadRequest, InvalidCursor
from readit.services.ranking import Ranker

logger = logging.getLogger(__name__)


class ListingPaginator:
    """Builds pages of ranked items from an injected store and ranker."""

    def __init__(self, store: ContentStore, ranker: Ranker) -> None:
        """Initialize the paginator.

        Args:
            store: Source of listing candidates.
            ranker: Scoring and ordering strategy.
        """
        self._store = store
        self._ranker = ranker

    def paginate(self, request: ListingRequest, now: Optional[float] = None) -> Page:
        """Produce one page of a listing.

        Args:
            request: Mode, scope, optional cursor and (already clamped) limit.
            now: Unix timestamp to rank at. Defaults to the current time.
                Ignored when the cursor carries its own ranking instant.

        Returns:
            The page with its before/after cursors.

        Raises:
            BadRequest: If both ``after`` and ``before`` are given.
            InvalidCursor: If the cursor is malformed or from another mode.
        """
        if request.after is not None and request.before is not None:
            raise BadRequest("Only one of 'after' or 'before' should be specified.")

        anchor: Optional[CursorPosition] = None
        if request.after is not None:
            anchor = self._decode_anchor(request.after, request.mode)
        elif request.before is not None:
            anchor = self._decode_anchor(request.before, request.mode)

        if anchor is not None and anchor.ranked_at is not None:
            now = anchor.ranked_at
        elif now is None:
            now = time.time()
        ranked_at = now if request.mode.time_dependent else None

        candidates = [
            item
            for item in self._store.fetch_candidates(request.scope, request.mode)
            if not item.deleted
        ]
        ranked = self._ranker.rank(candidates, request.mode, now)
        keys = [(-score, item.id) for score, item in ranked]
        total = len(ranked)

        if anchor is None:
            start, end = 0, min(request.limit, total)
        else:
            anchor_key = (-anchor.sort_key, anchor.item_id)
            if request.after is not None:
                start = bisect_right(keys, anchor_key)
                end = min(start + request.limit, total)
            else:
                end = bisect_left(keys, anchor_key)
                start = max(0, end - request.limit)

        window = ranked[start:end]
        if not window:
            logger.debug(
                f"Empty {request.mode.value} page for scope={request.scope!r} "
                f"({total} candidates)"
            )
            return Page(items=[], before=None, after=None)

        first_score, first_item = window[0]
        last_score, last_item = window[-1]
        before = (
            self._cursor_for(request.mode, first_score, first_item, ranked_at)
            if start > 0
            else None
        )
        after = (
            self._cursor_for(request.mode, last_score, last_item, ranked_at)
            if end < total
            else None
        )

        logger.debug(
            f"Served {request.mode.value} page for scope={request.scope!r}: "
            f"items {start}..{end - 1} of {total}"
        )
        return Page(items=[item for _, item in window], before=before, after=after)

    @staticmethod
    def _decode_anchor(token: str, mode: ListingMode) -> CursorPosition:
        position = decode_cursor(token)
        if position.mode is not mode:
            raise InvalidCursor(
                f"Cursor was issued for the '{position.mode.value}' listing, "
                f"not '{mode.value}'."
            )
        if position.ranked_at is not None and not mode.time_dependent:
            raise InvalidCursor("Malformed cursor.")
        return position

    @staticmethod
    def _cursor_for(
        mode: ListingMode, score: float, item: ListableItem, ranked_at: Optional[float]
    ) -> str:
        return encode_cursor(mode, score, item.id, ranked_at=ranked_at)
