"""Core data models for Basket Advisor."""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from .item_normalizer import normalize_item_name, normalize_items


def new_basket_id() -> str:
    """Generate an opaque basket identifier."""
    return f"bkt_{uuid4().hex[:16]}"


def utc_now_iso() -> str:
    """Current UTC instant as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class DetailedItem(BaseModel):
    """A single itemized entry within a basket."""

    name: str
    qty: float = 1
    category: str | None = None
    unit: str | None = None  # e.g. kg, un, L
    price: float | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> str:
        return normalize_item_name(value)

    @field_validator("qty", mode="before")
    @classmethod
    def _default_qty(cls, value: Any) -> float:
        try:
            qty = float(value)
        except (TypeError, ValueError):
            return 1
        return qty if qty > 0 else 1

    @field_validator("category", "unit", mode="before")
    @classmethod
    def _strip_optional(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class Basket(BaseModel):
    """One completed shopping trip's itemized record."""

    id: str = Field(default_factory=new_basket_id)
    items: list[str] = Field(default_factory=list)
    items_detailed: list[DetailedItem] | None = None
    store: str | None = None
    total: float | None = None
    created_at: str = Field(default_factory=utc_now_iso)
    user_id: str | None = None

    @field_validator("items", mode="before")
    @classmethod
    def _normalize_items(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = [value]
        if value is not None and not isinstance(value, (list, tuple, set)):
            raise ValueError("items must be a list of names")
        return normalize_items(value)

    @field_validator("items_detailed", mode="before")
    @classmethod
    def _drop_unnamed(cls, value: Any) -> Any:
        if value is None or (isinstance(value, (list, tuple)) and not value):
            return None
        if not isinstance(value, (list, tuple)):
            raise ValueError("items_detailed must be a list of records")
        kept = [
            entry
            for entry in value
            if not isinstance(entry, dict) or normalize_item_name(entry.get("name"))
        ]
        return kept or None

    @field_validator("created_at", mode="before")
    @classmethod
    def _serialize_created_at(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        if value is None:
            return ""
        return str(value)

    @model_validator(mode="after")
    def _derive_items(self) -> "Basket":
        if self.items_detailed:
            self.items_detailed = [d for d in self.items_detailed if d.name] or None
        if not self.items and self.items_detailed:
            self.items = normalize_items(d.name for d in self.items_detailed)
        return self

    def detailed(self) -> list[DetailedItem]:
        """Itemized entries, falling back to bare names with qty=1."""
        if self.items_detailed:
            return list(self.items_detailed)
        return [DetailedItem(name=name) for name in self.items]


class Recommendation(BaseModel):
    """A scored candidate item from the co-occurrence recommender."""

    item: str
    score: float
    confidence: float
    support: float
    lift: float


class ComplementTip(BaseModel):
    """A complementary item suggestion."""

    item: str
    reason: str
    score: float | None = None


class Tip(BaseModel):
    """A seasonal or replenishment suggestion."""

    item: str
    reason: str


class TipsResponse(BaseModel):
    """Shopping tips grouped by source."""

    complements: list[ComplementTip] = Field(default_factory=list)
    seasonal: list[Tip] = Field(default_factory=list)
    replenishment: list[Tip] = Field(default_factory=list)


class PriceInsight(BaseModel):
    """Price statistics for one item across basket history."""

    item: str
    avg: float
    last: float
    change: float | None = None  # percent vs previous observation
    count: int


class PopularItem(BaseModel):
    """How many baskets contained an item."""

    item: str
    count: int
