"""Opaque pagination cursors.

A cursor names a position in a listing's total order: the sort key of an
item (its score, or its timestamp for ``new``) together with its id, tagged
with the mode it was issued under. Cursors for time-dependent modes also
carry ``ranked_at``, the instant the listing was scored at, so later pages
are cut from the same order as the first. The token is compact JSON wrapped
in unpadded URL-safe base64. Callers must treat it as opaque.
"""

import base64
import binascii
import math
from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, FiniteFloat, StrictInt, ValidationError

from readit.models.schemas import ListingMode
from readit.services.errors import InvalidCursor

# Generous upper bound; real tokens are well under 100 characters.
_MAX_TOKEN_LENGTH = 512


class CursorPosition(NamedTuple):
    """Decoded cursor contents."""

    mode: ListingMode
    sort_key: float
    item_id: int
    ranked_at: Optional[float] = None


class _CursorPayload(BaseModel):
    """Wire shape of a cursor, validated strictly on decode."""

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    mode: ListingMode
    sort_key: FiniteFloat
    item_id: StrictInt
    ranked_at: Optional[FiniteFloat] = None


def encode_cursor(
    mode: ListingMode,
    sort_key: float,
    item_id: int,
    ranked_at: Optional[float] = None,
) -> str:
    """Encode a listing position as an opaque token.

    Deterministic: the same position always yields the same token, and
    distinct positions never share one.

    Args:
        mode: Listing mode the cursor belongs to.
        sort_key: The item's sort key in that mode.
        item_id: The item's id.
        ranked_at: Unix timestamp the listing was scored at, for modes
            whose scores depend on the current time.

    Returns:
        URL-safe token string.

    Raises:
        ValueError: If a timestamp or sort key is not finite, or the id is
            negative.
    """
    if not math.isfinite(sort_key):
        raise ValueError(f"Cursor sort key must be finite, got {sort_key!r}")
    if item_id < 0:
        raise ValueError(f"Cursor item id must be non-negative, got {item_id}")
    if ranked_at is not None and not math.isfinite(ranked_at):
        raise ValueError(f"Cursor ranking time must be finite, got {ranked_at!r}")
    payload = _CursorPayload(
        mode=ListingMode(mode),
        sort_key=float(sort_key),
        item_id=int(item_id),
        ranked_at=float(ranked_at) if ranked_at is not None else None,
    )
    raw = payload.model_dump_json(exclude_none=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(token: str) -> CursorPosition:
    """Decode a token produced by :func:`encode_cursor`.

    Args:
        token: Opaque cursor string from a client.

    Returns:
        The (mode, sort_key, item_id, ranked_at) position.

    Raises:
        InvalidCursor: If the token is not a well-formed cursor.
    """
    if not token or len(token) > _MAX_TOKEN_LENGTH:
        raise InvalidCursor("Malformed cursor.")

    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        payload = _CursorPayload.model_validate_json(raw)
    except (binascii.Error, ValueError, ValidationError) as e:
        raise InvalidCursor("Malformed cursor.") from e

    if payload.item_id < 0:
        raise InvalidCursor("Malformed cursor.")

    return CursorPosition(payload.mode, payload.sort_key, payload.item_id, payload.ranked_at)
