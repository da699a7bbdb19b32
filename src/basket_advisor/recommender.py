"""Market-basket recommender using co-occurrence, confidence and lift."""

import logging
from collections import Counter
from collections.abc import Iterable
from itertools import combinations

from .item_normalizer import normalize_item_name, normalize_items
from .models import Basket, Recommendation

logger = logging.getLogger(__name__)

CONFIDENCE_WEIGHT = 0.6
LIFT_WEIGHT = 0.4
LIFT_CAP = 3.0


class _SupportTable:
    """Item and pair occurrence counts over a basket snapshot."""

    def __init__(self, baskets: list[Basket]):
        self.total = max(1, len(baskets))
        self.item_counts: Counter[str] = Counter()
        self.pair_counts: Counter[tuple[str, str]] = Counter()

        for basket in baskets:
            unique = sorted(normalize_items(basket.items))
            self.item_counts.update(unique)
            # unique is sorted, so every pair comes out lexicographically ordered
            self.pair_counts.update(combinations(unique, 2))

    def support(self, item: str) -> float:
        return self.item_counts.get(item, 0) / self.total

    def pair_support(self, x: str, y: str) -> float:
        key = (x, y) if x < y else (y, x)
        return self.pair_counts.get(key, 0) / self.total


def _best_rule(
    table: _SupportTable, current: set[str], candidate: str
) -> Recommendation | None:
    """Strongest rule X -> candidate over every X in the current list."""
    support_y = table.support(candidate)
    best: Recommendation | None = None

    for x in current:
        support_x = table.support(x)
        if support_x == 0:
            continue
        support_xy = table.pair_support(x, candidate)
        if support_xy == 0:
            continue

        confidence = support_xy / support_x
        lift = confidence / (support_y or 1e-9)
        score = CONFIDENCE_WEIGHT * confidence + LIFT_WEIGHT * min(lift, LIFT_CAP)
        if best is None or score > best.score:
            best = Recommendation(
                item=candidate,
                score=score,
                confidence=confidence,
                support=support_y,
                lift=lift,
            )

    if best is None or best.score <= 0:
        return None
    return best


def recommend(
    current_items: Iterable[str],
    baskets: Iterable[Basket],
    limit: int = 10,
    min_support: float = 0.01,
) -> list[Recommendation]:
    """Rank items likely to complete the current list.

    Args:
        current_items: Items already on the list; never recommended back
        baskets: Purchase history snapshot
        limit: Maximum number of recommendations
        min_support: Minimum item support for rule-based candidates

    Returns:
        Recommendations sorted by score descending, then item name
    """
    history = list(baskets)
    current = {normalize_item_name(item) for item in current_items} - {""}
    table = _SupportTable(history)

    candidates: list[Recommendation] = []
    for item in table.item_counts:
        if item in current or table.support(item) < min_support:
            continue
        rule = _best_rule(table, current, item)
        if rule is not None:
            candidates.append(rule)

    if not candidates:
        # Popularity fallback ignores min_support
        logger.debug("No co-occurrence rules fired; falling back to popularity")
        candidates = [
            Recommendation(
                item=item,
                score=count / table.total,
                confidence=0.0,
                support=count / table.total,
                lift=1.0,
            )
            for item, count in table.item_counts.items()
            if item not in current
        ]

    candidates.sort(key=lambda r: (-r.score, r.item))
    logger.debug(
        "Scored %d candidates from %d baskets", len(candidates), len(history)
    )
    return candidates[: max(0, limit)]
