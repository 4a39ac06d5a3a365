#!/usr/bin/env python3
"""ETH Yields CLI Tool.

Aggregates ETH yield opportunities from DefiLlama, StakeDAO, Pendle and
Origin Protocol and presents them as a terminal table, as JSON, or through
the web API.
"""

import json
from typing import List

import click
from rich.console import Console

from aggregator import get_aggregator
from config import LOG_LEVEL
from models.opportunity import Opportunity
from utils.display import DisplayFormatter
from utils.log import setup_logging

console = Console()


def sort_opportunities(
    opportunities: List[Opportunity],
    sort_by: str = "tvl",
    ascending: bool = False,
) -> List[Opportunity]:
    """Sort opportunities by specified field.

    Args:
        opportunities: List of opportunities to sort.
        sort_by: Field to sort by (tvl, apy, protocol, product).
        ascending: If True, sort ascending; otherwise descending.

    Returns:
        Sorted list of opportunities.
    """
    sort_keys = {
        "tvl": lambda o: o.tvl_usd,
        "apy": lambda o: o.apy_pct,
        "protocol": lambda o: o.protocol.lower(),
        "product": lambda o: o.product.lower(),
    }

    key_func = sort_keys.get(sort_by.lower(), sort_keys["tvl"])
    return sorted(opportunities, key=key_func, reverse=not ascending)


@click.command()
@click.option(
    "--sort-by",
    type=click.Choice(["tvl", "apy", "protocol", "product"], case_sensitive=False),
    default="tvl",
    help="Sort results by field (default: tvl)",
)
@click.option(
    "--ascending", "--asc",
    is_flag=True,
    help="Sort in ascending order (default is descending)",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the aggregate as JSON instead of a table",
)
@click.option(
    "--serve",
    is_flag=True,
    help="Run the web API instead of printing results",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="Host for --serve")
@click.option("--port", default=5000, show_default=True, type=int, help="Port for --serve")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=LOG_LEVEL,
    show_default=True,
    help="Logging verbosity",
)
def main(
    sort_by: str,
    ascending: bool,
    as_json: bool,
    serve: bool,
    host: str,
    port: int,
    log_level: str,
):
    """ETH Yields - ETH-denominated yields across DeFi in one list.

    Examples:

        # Table sorted by TVL
        python main.py

        # Highest APY first
        python main.py --sort-by apy

        # Raw aggregate
        python main.py --json

        # Web API on http://127.0.0.1:5000/api/yields
        python main.py --serve
    """
    setup_logging(log_level)

    if serve:
        from app import app
        console.print(f"\n[bold]ETH Yields API[/bold] on http://{host}:{port}/api/yields\n")
        app.run(host=host, port=port)
        return

    result = get_aggregator().assemble()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    opportunities = sort_opportunities(result.opportunities, sort_by=sort_by, ascending=ascending)

    console.print()
    DisplayFormatter().display_result(result, opportunities)
    console.print()


if __name__ == "__main__":
    main()
