"""Basket Advisor - Recommendations and shopping tips from purchase history."""

from .config import ConfigManager
from .data_store import BasketNotFoundError, DataStore, InvalidBasketError
from .insights import popular_items, price_insights
from .item_normalizer import normalize_item_name, normalize_items, parse_timestamp
from .models import (
    Basket,
    ComplementTip,
    DetailedItem,
    PopularItem,
    PriceInsight,
    Recommendation,
    Tip,
    TipsResponse,
)
from .output_formatter import OutputFormatter
from .recommender import recommend
from .tips import COMPLEMENT_RULES, SEASONAL_ITEMS, TipComposer, build_tips

__version__ = "0.1.0"

__all__ = [
    "Basket",
    "BasketNotFoundError",
    "build_tips",
    "COMPLEMENT_RULES",
    "ComplementTip",
    "ConfigManager",
    "DataStore",
    "DetailedItem",
    "InvalidBasketError",
    "normalize_item_name",
    "normalize_items",
    "OutputFormatter",
    "parse_timestamp",
    "popular_items",
    "PopularItem",
    "price_insights",
    "PriceInsight",
    "recommend",
    "Recommendation",
    "SEASONAL_ITEMS",
    "Tip",
    "TipComposer",
    "TipsResponse",
]
