"""Output formatting for CLI and programmatic use."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Formats output for both Rich terminal and JSON modes."""

    def __init__(self, json_mode: bool = False):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode
        self.console = Console()

    def output(self, data: dict[str, Any], message: str = "") -> None:
        """Output data in appropriate format.

        Args:
            data: Data to output
            message: Optional message for Rich mode
        """
        if self.json_mode:
            self._output_json(data)
        else:
            self._output_rich(data, message)

    def _output_json(self, data: dict[str, Any]) -> None:
        """Output as JSON to stdout."""
        print(json.dumps(data, indent=2, ensure_ascii=False))

    def _output_rich(self, data: dict[str, Any], message: str) -> None:
        """Output with Rich formatting."""
        if message:
            self.console.print(f"[green]✓[/green] {message}")

        payload = data.get("data", {})
        if "baskets" in payload:
            self._render_baskets(payload["baskets"])
        elif "basket" in payload:
            self._render_basket(payload["basket"])
        elif "recommendations" in payload:
            self._render_recommendations(payload["recommendations"])
        elif "tips" in payload:
            self._render_tips(payload["tips"])
        elif "prices" in payload:
            self._render_prices(payload["prices"])
        elif "popular" in payload:
            self._render_popular(payload["popular"])

    def _render_baskets(self, baskets: list[dict]) -> None:
        """Render basket history."""
        if not baskets:
            self.console.print("[dim]No baskets recorded yet[/dim]")
            return

        table = Table(title="Basket History", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Date", style="green")
        table.add_column("Store", style="yellow")
        table.add_column("Items", style="cyan", no_wrap=False)
        table.add_column("Total", style="magenta", justify="right")

        for basket in baskets:
            total = basket.get("total")
            table.add_row(
                basket["id"],
                (basket.get("created_at") or "-")[:10],
                basket.get("store") or "-",
                ", ".join(basket.get("items", [])),
                f"${total:.2f}" if total is not None else "-",
            )

        self.console.print(table)
        self.console.print(f"\nTotal baskets: {len(baskets)}")

    def _render_basket(self, basket: dict) -> None:
        """Render a single basket with its itemized entries."""
        self.console.print(f"\n[bold]{basket['id']}[/bold]")
        self.console.print(f"  Date: {basket.get('created_at') or '-'}")
        if basket.get("store"):
            self.console.print(f"  Store: {basket['store']}")
        if basket.get("total") is not None:
            self.console.print(f"  Total: ${basket['total']:.2f}")

        detailed = basket.get("items_detailed")
        if not detailed:
            self.console.print(f"  Items: {', '.join(basket.get('items', []))}")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Item")
        table.add_column("Qty", justify="right")
        table.add_column("Unit")
        table.add_column("Category")
        table.add_column("Price", justify="right")
        for entry in detailed:
            price = entry.get("price")
            table.add_row(
                entry["name"],
                f"{entry.get('qty', 1):g}",
                entry.get("unit") or "-",
                entry.get("category") or "-",
                f"${price:.2f}" if price is not None else "-",
            )
        self.console.print(table)

    def _render_recommendations(self, recs: list[dict]) -> None:
        """Render scored recommendations."""
        if not recs:
            self.console.print("[dim]Not enough history for recommendations[/dim]")
            return

        table = Table(title="Recommendations", show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Item", style="cyan")
        table.add_column("Score", justify="right", style="magenta")
        table.add_column("Confidence", justify="right")
        table.add_column("Support", justify="right")
        table.add_column("Lift", justify="right")

        for rank, rec in enumerate(recs, start=1):
            table.add_row(
                str(rank),
                rec["item"],
                f"{rec['score']:.3f}",
                f"{rec['confidence'] * 100:.0f}%",
                f"{rec['support'] * 100:.0f}%",
                f"{rec['lift']:.2f}",
            )
        self.console.print(table)

    def _render_tips(self, tips: dict) -> None:
        """Render complements, seasonal and replenishment tips."""
        sections = [
            ("Complements", "complements", "cyan"),
            ("Seasonal", "seasonal", "yellow"),
            ("Time to Restock", "replenishment", "red"),
        ]
        if not any(tips.get(key) for _, key, _ in sections):
            self.console.print("[dim]No tips at this time[/dim]")
            return

        for title, key, color in sections:
            entries = tips.get(key) or []
            if not entries:
                continue
            self.console.print(f"\n[bold]{title}[/bold]")
            for tip in entries:
                self.console.print(
                    f"  [{color}]•[/{color}] [bold]{tip['item']}[/bold]: {tip['reason']}"
                )

    def _render_prices(self, prices: list[dict]) -> None:
        """Render per-item price insights."""
        if not prices:
            self.console.print("[dim]No prices recorded[/dim]")
            return

        table = Table(title="Price Insights", show_header=True, header_style="bold cyan")
        table.add_column("Item", style="cyan")
        table.add_column("Average", justify="right")
        table.add_column("Last", justify="right")
        table.add_column("Change", justify="right")
        table.add_column("Samples", justify="right", style="dim")

        for row in prices:
            change = row.get("change")
            if change is None:
                change_text = "-"
            else:
                color = "red" if change > 0 else "green" if change < 0 else "white"
                change_text = f"[{color}]{change:+.1f}%[/{color}]"
            table.add_row(
                row["item"],
                f"${row['avg']:.2f}",
                f"${row['last']:.2f}",
                change_text,
                str(row["count"]),
            )
        self.console.print(table)

    def _render_popular(self, popular: list[dict]) -> None:
        """Render most frequently bought items."""
        if not popular:
            self.console.print("[dim]No purchase history[/dim]")
            return

        table = Table(title="Popular Items", show_header=True, header_style="bold cyan")
        table.add_column("Item", style="cyan")
        table.add_column("Baskets", justify="right", style="magenta")
        for row in popular:
            table.add_row(row["item"], str(row["count"]))
        self.console.print(table)

    def error(self, message: str, error_code: str | None = None) -> None:
        """Output error message.

        Args:
            message: Error message
            error_code: Optional error code
        """
        if self.json_mode:
            output = {"success": False, "error": message}
            if error_code:
                output["error_code"] = error_code
            print(json.dumps(output))
        else:
            self.console.print(f"[red]✗ Error:[/red] {message}")

    def success(self, message: str, data: dict | None = None) -> None:
        """Output success message.

        Args:
            message: Success message
            data: Optional data to include
        """
        if self.json_mode:
            output: dict[str, Any] = {"success": True, "message": message}
            if data:
                output["data"] = data
            print(json.dumps(output, ensure_ascii=False))
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Output warning message.

        Args:
            message: Warning message
        """
        if self.json_mode:
            print(json.dumps({"warning": message}))
        else:
            self.console.print(f"[yellow]⚠[/yellow] {message}")
