"""CLI entry point for Basket Advisor."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import ConfigManager
from .data_store import BasketNotFoundError, DataStore, InvalidBasketError
from .insights import popular_items, price_insights
from .item_normalizer import normalize_item_name
from .models import Basket, DetailedItem
from .output_formatter import OutputFormatter
from .recommender import recommend
from .tips import build_tips

app = typer.Typer(
    name="basket",
    help="Shopping history with recommendations, seasonal tips and restock reminders",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# Global state for formatter and config (set by callback)
formatter: OutputFormatter = OutputFormatter()
config: ConfigManager | None = None
data_store: DataStore | None = None
current_user: str | None = None


def get_config() -> ConfigManager:
    """Get or create ConfigManager instance."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def get_data_store() -> DataStore:
    """Get or create DataStore instance using config values."""
    global data_store
    if data_store is None:
        data_store = DataStore(data_dir=get_config().data.storage_dir)
    return data_store


def configure_logging(level: str) -> None:
    """Send package logs to stderr through Rich."""
    package_logger = logging.getLogger("basket_advisor")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    package_logger.propagate = False


def _split_items(values: list[str] | None) -> list[str]:
    """Accept both repeated arguments and comma-separated lists."""
    items: list[str] = []
    for value in values or []:
        items.extend(part for part in value.split(",") if part.strip())
    return items


def _parse_assignments(values: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated ``item=value`` options."""
    parsed: dict[str, str] = {}
    for value in values or []:
        if "=" not in value:
            raise typer.BadParameter(f"Expected item=value, got '{value}'", param_hint=option)
        item, raw = value.rsplit("=", 1)
        parsed[normalize_item_name(item)] = raw.strip()
    return parsed


def _detailed_items(
    items: list[str],
    prices: list[str] | None,
    quantities: list[str] | None,
    categories: list[str] | None,
    units: list[str] | None,
) -> list[DetailedItem] | None:
    """Build itemized entries when any per-item detail was given."""
    price_map = _parse_assignments(prices, "--price")
    qty_map = _parse_assignments(quantities, "--qty")
    category_map = _parse_assignments(categories, "--category")
    unit_map = _parse_assignments(units, "--unit")
    if not (price_map or qty_map or category_map or unit_map):
        return None

    try:
        detailed = []
        for name in dict.fromkeys(normalize_item_name(item) for item in items):
            if not name:
                continue
            price = price_map.get(name)
            detailed.append(
                DetailedItem(
                    name=name,
                    qty=qty_map.get(name, 1),
                    category=category_map.get(name),
                    unit=unit_map.get(name),
                    price=float(price) if price is not None else None,
                )
            )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--price") from e
    return detailed


@app.callback()
def main(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON for programmatic use")
    ] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path")] = None,
    user: Annotated[str | None, typer.Option("--user", help="Scope history to this user")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Basket Advisor CLI - Learn from your shopping history."""
    global formatter, config, data_store, current_user

    formatter = OutputFormatter(json_mode=json_output)

    # Load config early
    config = ConfigManager()
    configure_logging("DEBUG" if verbose else config.logging.level)

    # CLI --data-dir overrides config, which overrides default
    effective_data_dir = data_dir if data_dir else config.data.storage_dir
    data_store = DataStore(data_dir=effective_data_dir)
    current_user = user or config.defaults.user
    logger.debug("Using data dir %s for user %s", effective_data_dir, current_user or "-")


def _history() -> list[Basket]:
    """Snapshot of the current user's history for analytics."""
    limit = get_config().recommender.history_limit
    return get_data_store().list_baskets(limit=limit, user_id=current_user)


@app.command()
def add(
    items: Annotated[list[str], typer.Argument(help="Items bought (comma-separated allowed)")],
    store: Annotated[str | None, typer.Option("--store", "-s", help="Store name")] = None,
    total: Annotated[float | None, typer.Option("--total", "-t", help="Basket total")] = None,
    price: Annotated[
        list[str] | None, typer.Option("--price", "-p", help="Item price (item=price)")
    ] = None,
    qty: Annotated[
        list[str] | None, typer.Option("--qty", "-q", help="Item quantity (item=qty)")
    ] = None,
    category: Annotated[
        list[str] | None, typer.Option("--category", "-c", help="Item category (item=category)")
    ] = None,
    unit: Annotated[
        list[str] | None, typer.Option("--unit", "-u", help="Item unit (item=unit)")
    ] = None,
) -> None:
    """Record a completed shopping basket."""
    try:
        names = _split_items(items)
        detailed = _detailed_items(names, price, qty, category, unit)
        basket = get_data_store().add_basket(
            items=names,
            items_detailed=detailed,
            store=store or get_config().defaults.store,
            total=total,
            user_id=current_user,
        )
        formatter.output(
            {
                "success": True,
                "message": f"Recorded basket with {len(basket.items)} items",
                "data": {"basket": basket.model_dump(mode="json")},
            },
            f"Recorded basket with {len(basket.items)} items",
        )
    except InvalidBasketError as e:
        formatter.error(str(e), error_code="INVALID_BASKET")
        raise typer.Exit(code=1)
    except typer.BadParameter:
        raise
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def history(
    limit: Annotated[int, typer.Option("--limit", "-l", help="Number of baskets", min=1)] = 50,
) -> None:
    """Show recent baskets, newest first."""
    try:
        baskets = get_data_store().list_baskets(limit=limit, user_id=current_user)
        formatter.output(
            {
                "success": True,
                "data": {
                    "count": len(baskets),
                    "baskets": [b.model_dump(mode="json") for b in baskets],
                },
            }
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def show(
    basket_id: Annotated[str, typer.Argument(help="Basket ID")],
) -> None:
    """Show one basket."""
    try:
        basket = get_data_store().get_basket(basket_id, user_id=current_user)
        if basket is None:
            raise BasketNotFoundError(basket_id)
        formatter.output({"success": True, "data": {"basket": basket.model_dump(mode="json")}})
    except BasketNotFoundError as e:
        formatter.error(str(e), error_code="BASKET_NOT_FOUND")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def edit(
    basket_id: Annotated[str, typer.Argument(help="Basket ID")],
    item: Annotated[
        list[str] | None, typer.Option("--item", "-i", help="Replace items (repeatable)")
    ] = None,
    store: Annotated[str | None, typer.Option("--store", "-s", help="New store")] = None,
    total: Annotated[float | None, typer.Option("--total", "-t", help="New total")] = None,
) -> None:
    """Edit a recorded basket."""
    try:
        ds = get_data_store()
        if ds.get_basket(basket_id, user_id=current_user) is None:
            raise BasketNotFoundError(basket_id)

        patch: dict = {}
        if item:
            patch["items"] = _split_items(item)
        if store is not None:
            patch["store"] = store
        if total is not None:
            patch["total"] = total

        basket = ds.update_basket(basket_id, **patch)
        formatter.output(
            {
                "success": True,
                "message": f"Updated basket {basket_id}",
                "data": {"basket": basket.model_dump(mode="json")},
            },
            f"Updated basket {basket_id}",
        )
    except BasketNotFoundError as e:
        formatter.error(str(e), error_code="BASKET_NOT_FOUND")
        raise typer.Exit(code=1)
    except InvalidBasketError as e:
        formatter.error(str(e), error_code="INVALID_BASKET")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def delete(
    basket_id: Annotated[str, typer.Argument(help="Basket ID")],
) -> None:
    """Delete a recorded basket."""
    try:
        ds = get_data_store()
        if ds.get_basket(basket_id, user_id=current_user) is None:
            raise BasketNotFoundError(basket_id)

        removed = ds.delete_basket(basket_id)
        formatter.success(
            f"Deleted basket {removed.id}", {"basket": removed.model_dump(mode="json")}
        )
    except BasketNotFoundError as e:
        formatter.error(str(e), error_code="BASKET_NOT_FOUND")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def popular(
    limit: Annotated[int, typer.Option("--limit", "-l", help="Number of items", min=1)] = 20,
) -> None:
    """Show the most frequently bought items."""
    try:
        ranked = popular_items(_history(), limit=limit)
        if not ranked:
            formatter.warning("No baskets recorded yet")
            return
        formatter.output(
            {"success": True, "data": {"popular": [p.model_dump(mode="json") for p in ranked]}}
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command(name="recommend")
def recommend_items(
    items: Annotated[
        list[str] | None, typer.Argument(help="Items on your current list")
    ] = None,
    limit: Annotated[int | None, typer.Option("--limit", "-l", help="Max results", min=1)] = None,
    min_support: Annotated[
        float | None, typer.Option("--min-support", help="Minimum item support (0-1)")
    ] = None,
) -> None:
    """Recommend items that usually go with your list."""
    try:
        cfg = get_config().recommender
        recs = recommend(
            _split_items(items),
            _history(),
            limit=limit or cfg.limit,
            min_support=cfg.min_support if min_support is None else min_support,
        )
        formatter.output(
            {
                "success": True,
                "data": {"recommendations": [r.model_dump(mode="json") for r in recs]},
            }
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def tips(
    items: Annotated[
        list[str] | None, typer.Argument(help="Items on your current list")
    ] = None,
) -> None:
    """Complements, seasonal picks and restock reminders for your list."""
    try:
        result = build_tips(_split_items(items), _history())
        formatter.output({"success": True, "data": {"tips": result.model_dump(mode="json")}})
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def prices() -> None:
    """Average, last and change of recorded item prices."""
    try:
        baskets = get_data_store().list_baskets(user_id=current_user)
        insights = price_insights(baskets)
        if not insights:
            formatter.warning("No item prices recorded yet")
            return
        formatter.output(
            {"success": True, "data": {"prices": [i.model_dump(mode="json") for i in insights]}}
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command(name="export")
def export_history(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to file instead of stdout")
    ] = None,
) -> None:
    """Export basket history as JSON."""
    try:
        payload = {"baskets": get_data_store().export_baskets(user_id=current_user)}
        if output is None:
            print(json.dumps(payload, indent=2, ensure_ascii=False))
            return

        with open(output, "w") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        formatter.success(
            f"Exported {len(payload['baskets'])} baskets to {output}",
            {"count": len(payload["baskets"]), "path": str(output)},
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command(name="import")
def import_history(
    file: Annotated[Path, typer.Argument(help="JSON file with a 'baskets' list")],
) -> None:
    """Import basket history from an export file."""
    try:
        with open(file) as f:
            payload = json.load(f)

        records = payload.get("baskets") if isinstance(payload, dict) else None
        if not isinstance(records, list) or not records:
            formatter.error("Nothing to import", error_code="INVALID_BASKET")
            raise typer.Exit(code=1)

        count = get_data_store().import_baskets(records, user_id=current_user)
        formatter.success(f"Imported {count} baskets", {"imported": count})
    except typer.Exit:
        raise
    except json.JSONDecodeError as e:
        formatter.error(f"Invalid JSON: {e}", error_code="INVALID_JSON")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
