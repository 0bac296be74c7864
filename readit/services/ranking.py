"""Ranking functions for listings.

Each listing mode turns an item's vote, comment and age signals into a
single float used only as a sort key. Every score is a pure function of
(item, mode, now): no randomness, no I/O. Ties are broken by item id
ascending so that the resulting order is strict and total, which the
cursor paginator depends on.
"""

import math
from statistics import NormalDist
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from readit.config import Settings
from readit.models.schemas import ListableItem, ListingMode

_SECONDS_PER_HOUR = 3600.0


class RankingConfig(BaseModel):
    """Tuning constants for the hot and best formulas."""

    hot_gravity: float = Field(default=1.8, gt=1.0)
    hot_age_floor_hours: float = Field(default=0.1, gt=0.0)
    best_confidence: float = Field(default=0.95, gt=0.0, lt=1.0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RankingConfig":
        """Build a config from application settings.

        Args:
            settings: Application settings.

        Returns:
            RankingConfig populated from the READIT_* ranking keys.
        """
        return cls(
            hot_gravity=settings.READIT_HOT_GRAVITY,
            hot_age_floor_hours=settings.READIT_HOT_AGE_FLOOR_HOURS,
            best_confidence=settings.READIT_BEST_CONFIDENCE,
        )

    @property
    def best_z(self) -> float:
        """Two-sided standard normal quantile for ``best_confidence``."""
        return NormalDist().inv_cdf(1.0 - (1.0 - self.best_confidence) / 2.0)


def new_score(item: ListableItem) -> float:
    """Newest first: the creation timestamp itself."""
    return float(item.created_utc)


def top_score(item: ListableItem) -> float:
    """Net votes. Net-negative items rank below unvoted ones, which score 0."""
    return float(item.net_score)


def hot_score(
    item: ListableItem,
    now: float,
    gravity: float = 1.8,
    age_floor_hours: float = 0.1,
) -> float:
    """Time-decayed popularity.

    ``sign(net) * log10(1 + |net|)`` divided by the item's age in hours
    raised to ``gravity``. Age is floored at ``age_floor_hours`` so brand
    new items (or items stamped slightly in the future) do not blow up.

    Args:
        item: Item to score.
        now: Current Unix timestamp.
        gravity: Exponent applied to age; > 1 makes decay super-linear.
        age_floor_hours: Minimum age used in the denominator.

    Returns:
        Hot score; 0.0 for items with no net votes, so net-negative items
        rank below unvoted ones.
    """
    net = item.net_score
    if net == 0:
        return 0.0
    popularity = math.copysign(math.log10(1 + abs(net)), net)
    age_hours = max((now - item.created_utc) / _SECONDS_PER_HOUR, age_floor_hours)
    return popularity / age_hours ** gravity


def best_score(up_votes: int, down_votes: int, z: float = 1.959963984540054) -> float:
    """Lower bound of the Wilson score interval for the up-vote proportion.

    Items with few votes get a wide interval and therefore a low bound, so
    a 10/0 item outranks a 100/90 one. Non-decreasing in up votes for fixed
    down votes and non-increasing in down votes for fixed up votes.

    Args:
        up_votes: Number of up votes.
        down_votes: Number of down votes.
        z: Standard normal quantile for the chosen confidence level.

    Returns:
        Score in [0, 1]; 0.0 when there are no up votes.
    """
    n = up_votes + down_votes
    if n == 0 or up_votes == 0:
        return 0.0
    p = up_votes / n
    z2 = z * z
    centre = p + z2 / (2 * n)
    spread = z * math.sqrt((p * (1 - p) + z2 / (4 * n)) / n)
    return max(0.0, (centre - spread) / (1 + z2 / n))


class Ranker:
    """Scores and orders listable items for a given mode."""

    def __init__(self, config: Optional[RankingConfig] = None) -> None:
        self._config = config or RankingConfig()
        self._best_z = self._config.best_z

    @property
    def config(self) -> RankingConfig:
        return self._config

    def score(self, item: ListableItem, mode: ListingMode, now: float) -> float:
        """Compute the sort score of a single item.

        Args:
            item: Item to score.
            mode: Listing mode.
            now: Unix timestamp the listing is evaluated at.

        Returns:
            The score; larger sorts first.
        """
        if mode is ListingMode.NEW:
            return new_score(item)
        elif mode is ListingMode.TOP:
            return top_score(item)
        elif mode is ListingMode.HOT:
            return hot_score(
                item,
                now,
                gravity=self._config.hot_gravity,
                age_floor_hours=self._config.hot_age_floor_hours,
            )
        elif mode is ListingMode.BEST:
            return best_score(item.up_votes, item.down_votes, z=self._best_z)
        raise ValueError(f"Unknown listing mode: {mode}")

    def rank(
        self, items: Iterable[ListableItem], mode: ListingMode, now: float
    ) -> list[tuple[float, ListableItem]]:
        """Score items and sort them into the mode's total order.

        Order is score descending, then id ascending.

        Args:
            items: Candidate items.
            mode: Listing mode.
            now: Unix timestamp the listing is evaluated at.

        Returns:
            (score, item) pairs in listing order.
        """
        scored = [(self.score(item, mode, now), item) for item in items]
        scored.sort(key=lambda pair: (-pair[0], pair[1].id))
        return scored
