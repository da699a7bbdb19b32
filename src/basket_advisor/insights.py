"""Aggregate statistics over basket history: prices and popularity."""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone

from .item_normalizer import normalize_items, parse_timestamp
from .models import Basket, PopularItem, PriceInsight

logger = logging.getLogger(__name__)

_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


def chronological(baskets: Iterable[Basket]) -> list[Basket]:
    """Oldest first; undated baskets lead, input order kept among equals."""
    return sorted(baskets, key=lambda b: parse_timestamp(b.created_at) or _UNDATED)


def price_insights(baskets: Iterable[Basket]) -> list[PriceInsight]:
    """Summarize recorded item prices.

    Args:
        baskets: Basket history in any order

    Returns:
        One PriceInsight per item with at least one recorded price, sorted by
        observation count descending, then item name
    """
    prices: dict[str, list[float]] = defaultdict(list)
    for basket in chronological(baskets):
        for entry in basket.items_detailed or []:
            if entry.price is None or not entry.name:
                continue
            prices[entry.name].append(float(entry.price))

    insights = []
    for item, observed in prices.items():
        last = observed[-1]
        previous = observed[-2] if len(observed) > 1 else None
        change = None
        if previous is not None and previous != 0:
            change = round((last - previous) / previous * 100, 2)

        insights.append(
            PriceInsight(
                item=item,
                avg=round(sum(observed) / len(observed), 2),
                last=round(last, 2),
                change=change,
                count=len(observed),
            )
        )

    insights.sort(key=lambda i: (-i.count, i.item))
    logger.debug("Computed price insights for %d items", len(insights))
    return insights


def popular_items(baskets: Iterable[Basket], limit: int = 20) -> list[PopularItem]:
    """Items ranked by how many baskets contain them."""
    counts: Counter[str] = Counter()
    for basket in baskets:
        counts.update(normalize_items(basket.items))

    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [PopularItem(item=item, count=count) for item, count in ranked[: max(0, limit)]]
