"""Data persistence for Basket Advisor.

Basket history lives in a single JSON file, ``history.json``, holding
``{"baskets": [...]}``. The store is the only component that touches disk;
analytics receive plain snapshots from it.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .item_normalizer import normalize_items, parse_timestamp
from .models import Basket, DetailedItem, utc_now_iso

logger = logging.getLogger(__name__)

_UNSET: Any = object()
_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


class BasketNotFoundError(Exception):
    """Raised when a basket is not found."""

    def __init__(self, basket_id: str):
        self.basket_id = basket_id
        super().__init__(f"Basket with ID '{basket_id}' not found")


class InvalidBasketError(Exception):
    """Raised when a basket would contain no usable items."""


class DataStore:
    """Manages JSON file persistence for basket history."""

    def __init__(self, data_dir: Path | None = None):
        """Initialize data store.

        Args:
            data_dir: Directory for data files. Defaults to ./data
        """
        self.data_dir = data_dir or Path.cwd() / "data"
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Create the data directory and an empty history file if missing."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self._history_path().exists():
            self._write_history([])

    def _history_path(self) -> Path:
        """Path to basket history file."""
        return self.data_dir / "history.json"

    def _read_history(self) -> list[Basket]:
        """Load every stored basket, tolerating a corrupt file."""
        path = self._history_path()
        if not path.exists():
            return []

        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable history file %s: %s", path, e)
            return []

        if not isinstance(data, dict) or not isinstance(data.get("baskets"), list):
            logger.warning("History file %s has no basket list; treating as empty", path)
            return []

        baskets = []
        for raw in data["baskets"]:
            try:
                baskets.append(Basket.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed basket record: %s", e)
        return baskets

    def _write_history(self, baskets: list[Basket]) -> None:
        """Persist the full basket list."""
        payload = {"baskets": [b.model_dump(mode="json") for b in baskets]}
        with open(self._history_path(), "w") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

    @staticmethod
    def _visible_to(basket: Basket, user_id: str | None) -> bool:
        """Without a user every basket is visible; with one, only its own."""
        return not user_id or basket.user_id == user_id

    @staticmethod
    def _newest_first(baskets: list[Basket]) -> list[Basket]:
        return sorted(
            baskets,
            key=lambda b: parse_timestamp(b.created_at) or _UNDATED,
            reverse=True,
        )

    # --- Basket Operations ---

    def add_basket(
        self,
        items: list[str] | None = None,
        items_detailed: list[DetailedItem | dict[str, Any]] | None = None,
        store: str | None = None,
        total: float | None = None,
        user_id: str | None = None,
        created_at: str | None = None,
    ) -> Basket:
        """Record a new basket.

        Args:
            items: Item names; derived from items_detailed when omitted
            items_detailed: Optional per-item records
            store: Store name
            total: Basket total
            user_id: Owner of the basket
            created_at: ISO timestamp; defaults to now

        Returns:
            The stored Basket

        Raises:
            InvalidBasketError: If no non-empty item remains
        """
        basket = Basket(
            items=items or [],
            items_detailed=items_detailed,
            store=store or None,
            total=total,
            user_id=user_id,
            created_at=created_at or utc_now_iso(),
        )
        if not basket.items:
            raise InvalidBasketError("A basket needs at least one item")

        baskets = self._read_history()
        baskets.append(basket)
        self._write_history(baskets)
        logger.info("Stored basket %s with %d items", basket.id, len(basket.items))
        return basket

    def list_baskets(self, limit: int | None = None, user_id: str | None = None) -> list[Basket]:
        """List baskets newest first.

        Args:
            limit: Maximum number of baskets; None or 0 for all
            user_id: Only baskets owned by this user

        Returns:
            List of baskets
        """
        baskets = [b for b in self._read_history() if self._visible_to(b, user_id)]
        baskets = self._newest_first(baskets)
        if limit:
            return baskets[:limit]
        return baskets

    def get_basket(self, basket_id: str, user_id: str | None = None) -> Basket | None:
        """Get a basket by ID, hidden when user_id is given and does not own it."""
        for basket in self._read_history():
            if basket.id == basket_id and self._visible_to(basket, user_id):
                return basket
        return None

    def update_basket(
        self,
        basket_id: str,
        items: list[str] | None = None,
        items_detailed: list[DetailedItem | dict[str, Any]] | None = _UNSET,
        store: str | None = _UNSET,
        total: float | None = _UNSET,
    ) -> Basket:
        """Apply a partial update; id and created_at never change.

        Raises:
            BasketNotFoundError: If basket not found
            InvalidBasketError: If the update leaves no items
        """
        baskets = self._read_history()
        for i, basket in enumerate(baskets):
            if basket.id != basket_id:
                continue

            data = basket.model_dump()
            if items is not None:
                data["items"] = items
            if items_detailed is not _UNSET:
                data["items_detailed"] = items_detailed
            if store is not _UNSET:
                data["store"] = store or None
            if total is not _UNSET:
                data["total"] = total

            updated = Basket.model_validate(data)
            if not updated.items:
                raise InvalidBasketError("A basket needs at least one item")

            baskets[i] = updated
            self._write_history(baskets)
            return updated

        raise BasketNotFoundError(basket_id)

    def delete_basket(self, basket_id: str) -> Basket:
        """Remove a basket.

        Raises:
            BasketNotFoundError: If basket not found
        """
        baskets = self._read_history()
        for i, basket in enumerate(baskets):
            if basket.id == basket_id:
                removed = baskets.pop(i)
                self._write_history(baskets)
                return removed

        raise BasketNotFoundError(basket_id)

    # --- Transfer Operations ---

    def export_baskets(self, user_id: str | None = None) -> list[dict[str, Any]]:
        """All baskets for a user as plain dicts, newest first."""
        return [b.model_dump(mode="json") for b in self.list_baskets(user_id=user_id)]

    def import_baskets(self, records: list[dict[str, Any]], user_id: str | None = None) -> int:
        """Import exported basket records as new baskets.

        Records without usable items are skipped. A record's created_at is kept
        when it parses, so imported history still drives replenishment.

        Returns:
            Number of baskets imported
        """
        baskets = self._read_history()
        imported = 0

        for record in records:
            if not isinstance(record, dict):
                continue
            created_at = record.get("created_at")
            try:
                basket = Basket(
                    items=record.get("items") or [],
                    items_detailed=record.get("items_detailed"),
                    store=record.get("store") or None,
                    total=record.get("total"),
                    user_id=user_id,
                    created_at=created_at if parse_timestamp(created_at) else utc_now_iso(),
                )
            except ValidationError as e:
                logger.warning("Skipping invalid import record: %s", e)
                continue
            if not normalize_items(basket.items):
                continue
            baskets.append(basket)
            imported += 1

        if imported:
            self._write_history(baskets)
        logger.info("Imported %d of %d basket records", imported, len(records))
        return imported
