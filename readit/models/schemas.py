"""Pydantic v2 schemas for listing requests, items and pages."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, field_validator

DEFAULT_LIMIT = 25
MIN_LIMIT = 1
MAX_LIMIT = 100

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number: int) -> str:
    """Encode a non-negative integer in lowercase base 36.

    Args:
        number: Integer to encode.

    Returns:
        Base-36 string, e.g. 71 -> '1z'.
    """
    if number < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class ListingMode(str, Enum):
    """Named ranking modes for a listing."""

    BEST = "best"
    HOT = "hot"
    NEW = "new"
    TOP = "top"

    @property
    def time_dependent(self) -> bool:
        """Whether scores in this mode change as the clock advances."""
        return self is ListingMode.HOT


class ItemKind(str, Enum):
    """Kinds of content a listing can be built from."""

    POST = "post"
    COMMENT = "comment"

    @property
    def type_prefix(self) -> str:
        """Reddit-style type prefix used in fullnames."""
        return "t3" if self is ItemKind.POST else "t1"


class ListableItem(BaseModel):
    """Read-only snapshot of a post or comment as seen by the listing engine."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    kind: ItemKind = ItemKind.POST
    created_utc: FiniteFloat
    up_votes: int = Field(default=0, ge=0)
    down_votes: int = Field(default=0, ge=0)
    num_comments: int = Field(default=0, ge=0)
    scope: Optional[str] = None
    deleted: bool = False
    author: str = "[deleted]"
    title: str = ""
    content: str = ""
    parent_id: Optional[int] = None

    @property
    def net_score(self) -> int:
        return self.up_votes - self.down_votes

    @property
    def fullname(self) -> str:
        return f"{self.kind.type_prefix}_{to_base36(self.id)}"


class ListingRequest(BaseModel):
    """A single listing query: mode, scope, optional cursor and page size.

    ``limit`` is clamped into [MIN_LIMIT, MAX_LIMIT] rather than rejected.
    Empty cursor strings (``?after=``) are treated as absent.
    """

    mode: ListingMode
    scope: Optional[str] = None
    after: Optional[str] = None
    before: Optional[str] = None
    limit: int = DEFAULT_LIMIT

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        return max(MIN_LIMIT, min(value, MAX_LIMIT))

    @field_validator("after", "before", mode="before")
    @classmethod
    def _blank_cursor_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Page(BaseModel):
    """One window of a listing plus the cursors on either side of it."""

    items: list[ListableItem] = Field(default_factory=list)
    before: Optional[str] = None
    after: Optional[str] = None


class ItemSummary(BaseModel):
    """Serialized form of a listed post or comment."""

    kind: str
    id: int
    name: str
    scope: Optional[str] = None
    parent_id: Optional[int] = None
    author: str
    title: str
    content: str
    up_votes: int
    down_votes: int
    score: int
    num_comments: int
    created_utc: float

    @classmethod
    def from_item(cls, item: ListableItem) -> "ItemSummary":
        return cls(
            kind=item.kind.type_prefix,
            id=item.id,
            name=item.fullname,
            scope=item.scope,
            parent_id=item.parent_id,
            author=item.author,
            title=item.title,
            content=item.content,
            up_votes=item.up_votes,
            down_votes=item.down_votes,
            score=item.net_score,
            num_comments=item.num_comments,
            created_utc=item.created_utc,
        )


class ListingResponse(BaseModel):
    """JSON body returned by every listing endpoint."""

    before: Optional[str] = None
    after: Optional[str] = None
    children: list[ItemSummary] = Field(default_factory=list)

    @classmethod
    def from_page(cls, page: Page) -> "ListingResponse":
        return cls(
            before=page.before,
            after=page.after,
            children=[ItemSummary.from_item(item) for item in page.items],
        )
