"""Display formatting utilities using rich library."""

from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from models.opportunity import AggregateResult, Opportunity


class DisplayFormatter:
    """Formats aggregated opportunities for terminal display."""

    PROTOCOL_COLORS = {
        "Lido": "cyan",
        "Rocket Pool": "red",
        "StakeDAO": "magenta",
        "Pendle": "yellow",
        "Origin Protocol": "blue",
    }

    def __init__(self):
        """Initialize the display formatter."""
        self.console = Console()

    def create_table(
        self,
        opportunities: List[Opportunity],
        title: str = "ETH Yield Opportunities",
    ) -> Table:
        """Create a rich table from opportunities.

        Args:
            opportunities: Opportunities to display.
            title: Table title.

        Returns:
            Rich Table object.
        """
        table = Table(
            title=title,
            show_header=True,
            header_style="bold",
            border_style="dim",
        )

        table.add_column("Protocol")
        table.add_column("Product", style="green")
        table.add_column("APY", justify="right", style="bold")
        table.add_column("TVL", justify="right")
        table.add_column("URL", style="dim", overflow="fold")

        for opp in opportunities:
            apy_style = "green" if opp.apy_pct > 5 else "white"
            if opp.apy_pct > 20:
                apy_style = "bold yellow"

            table.add_row(
                Text(opp.protocol, style=self.PROTOCOL_COLORS.get(opp.protocol, "white")),
                opp.product,
                Text(opp.formatted_apy, style=apy_style),
                opp.formatted_tvl,
                opp.url,
            )

        return table

    def display_result(self, result: AggregateResult, opportunities: List[Opportunity]) -> None:
        """Display the opportunity table followed by source health.

        Args:
            result: The assembled result (for timestamp and source status).
            opportunities: Opportunities to show, already sorted.
        """
        if not opportunities:
            self.console.print("[yellow]No opportunities found.[/yellow]")
            return

        title = f"ETH Yield Opportunities ({result.updated_at:%Y-%m-%d %H:%M UTC})"
        self.console.print(self.create_table(opportunities, title=title))
        self.display_sources(result)

    def display_sources(self, result: AggregateResult) -> None:
        """Display per-source status of one assembly."""
        summary = Text()
        for status in result.sources:
            if status.ok:
                summary.append(f"  ✓ {status.name}", style="green")
                summary.append(f": {status.count} in {status.elapsed_ms:.0f} ms\n")
            else:
                summary.append(f"  ✗ {status.name}", style="red")
                summary.append(f": {status.error}\n", style="dim")

        if result.fallback:
            summary.append("\n  Every source failed; showing fallback catalog\n", style="yellow")

        self.console.print(Panel(summary, title="Sources", border_style="dim"))

