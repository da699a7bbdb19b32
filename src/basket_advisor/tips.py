"""Shopping tips: complements, seasonal items and replenishment reminders."""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone

from .item_normalizer import normalize_items, parse_timestamp
from .models import Basket, ComplementTip, Tip, TipsResponse
from .recommender import recommend

logger = logging.getLogger(__name__)

FREQUENT_REASON = "frequent with current items"
SEASONAL_REASON = "seasonal"

# Symmetric: either side of a pair suggests the other
COMPLEMENT_RULES: tuple[tuple[str, str], ...] = (
    ("bread", "butter"),
    ("bread", "cheese"),
    ("pasta", "tomato sauce"),
    ("rice", "beans"),
    ("coffee", "coffee filters"),
    ("milk", "cereal"),
    ("beef", "charcoal"),
)

# Southern-Hemisphere calendar
SEASONAL_ITEMS: Mapping[int, tuple[str, ...]] = {
    1: ("sunscreen", "water"),
    2: ("sunscreen", "charcoal"),
    3: ("chocolate",),  # Easter usually falls in March/April
    4: ("chocolate",),
    5: ("instant broth", "tea"),
    6: ("mulled wine", "corn", "peanuts"),  # June festivals
    7: ("hot chocolate", "soup"),
    8: ("school supplies",),
    9: ("seasonal fruit",),
    10: ("candy",),
    11: ("panettone", "walnuts"),
    12: ("panettone", "chocotone", "sparkling wine"),
}

SECONDS_PER_DAY = 60 * 60 * 24
MIN_REPLENISH_DAYS = 7


class TipComposer:
    """Builds shopping tips from the current list and basket history."""

    def __init__(
        self,
        seasonal_items: Mapping[int, Sequence[str]] = SEASONAL_ITEMS,
        complement_rules: Sequence[tuple[str, str]] = COMPLEMENT_RULES,
        complement_limit: int = 10,
        recommendation_limit: int = 8,
    ):
        self.seasonal_items = seasonal_items
        self.complement_rules = complement_rules
        self.complement_limit = complement_limit
        self.recommendation_limit = recommendation_limit

    def build(
        self,
        current_items: Iterable[str],
        baskets: Iterable[Basket],
        now: datetime | None = None,
    ) -> TipsResponse:
        """Compose complements, seasonal and replenishment tips.

        Args:
            current_items: Items already on the list
            baskets: Purchase history snapshot
            now: Reference instant; defaults to the current UTC time

        Returns:
            TipsResponse with the three tip lists
        """
        current = normalize_items(current_items)
        history = list(baskets)
        now = parse_timestamp(now) or datetime.now(timezone.utc)

        return TipsResponse(
            complements=self.complements(current, history),
            seasonal=self.seasonal(now.month, current),
            replenishment=self.replenishment(current, history, now),
        )

    def complements(
        self, current_items: Iterable[str], baskets: Iterable[Basket]
    ) -> list[ComplementTip]:
        """Recommender output first, then rule-based complements, deduplicated."""
        current = set(normalize_items(current_items))
        recs = recommend(current, baskets, limit=self.recommendation_limit)

        tips = [ComplementTip(item=r.item, score=r.score, reason=FREQUENT_REASON) for r in recs]
        for a, b in self.complement_rules:
            if a in current and b not in current:
                tips.append(ComplementTip(item=b, reason=f"complements {a}"))
            if b in current and a not in current:
                tips.append(ComplementTip(item=a, reason=f"complements {b}"))

        seen: set[str] = set()
        unique: list[ComplementTip] = []
        for tip in tips:
            if tip.item in seen:
                continue
            seen.add(tip.item)
            unique.append(tip)
        return unique[: self.complement_limit]

    def seasonal(self, month: int, current_items: Iterable[str] = ()) -> list[Tip]:
        """Seasonal items for a calendar month (1-12)."""
        current = set(normalize_items(current_items))
        return [
            Tip(item=item, reason=SEASONAL_REASON)
            for item in normalize_items(self.seasonal_items.get(month, ()))
            if item not in current
        ]

    def replenishment(
        self,
        current_items: Iterable[str],
        baskets: Iterable[Basket],
        now: datetime,
    ) -> list[Tip]:
        """Items whose usual purchase interval has elapsed since the last purchase."""
        current = set(normalize_items(current_items))
        now = parse_timestamp(now) or datetime.now(timezone.utc)

        item_dates: dict[str, list[datetime]] = defaultdict(list)
        skipped = 0
        for basket in baskets:
            created = parse_timestamp(basket.created_at)
            if created is None:
                skipped += 1
                continue
            for name in normalize_items(basket.items):
                item_dates[name].append(created)
        if skipped:
            logger.debug("Skipped %d baskets with unparsable timestamps", skipped)

        tips: list[Tip] = []
        for name, dates in item_dates.items():
            if len(dates) < 2 or name in current:
                continue
            dates.sort()
            intervals = [
                (dates[i + 1] - dates[i]).total_seconds() / SECONDS_PER_DAY
                for i in range(len(dates) - 1)
            ]
            avg = sum(intervals) / len(intervals)
            days_since = (now - dates[-1]).total_seconds() / SECONDS_PER_DAY

            if days_since >= max(MIN_REPLENISH_DAYS, avg - 1):
                tips.append(Tip(item=name, reason=f"usually bought every ~{round(avg)} days"))

        tips.sort(key=lambda t: (t.reason, t.item))
        return tips


def build_tips(
    current_items: Iterable[str],
    baskets: Iterable[Basket],
    now: datetime | None = None,
) -> TipsResponse:
    """Build tips with the default seasonal table and complement rules."""
    return TipComposer().build(current_items, baskets, now=now)

