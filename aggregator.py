"""Assembles opportunities from every yield source into one result."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from config import MAX_WORKERS, load_catalog
from models.opportunity import AggregateResult, Opportunity, SourceStatus
from sources import SOURCES, BaseSource

logger = logging.getLogger(__name__)


def fallback_opportunities(catalog: Optional[dict] = None) -> List[Opportunity]:
    """Zeroed placeholders for every fixed catalog entry.

    Served when no source returned anything, so the listing is never empty.
    """
    if catalog is None:
        catalog = load_catalog()

    entries = list(catalog.get("defillama", {}).get("picks", []))
    entries += catalog.get("stakedao_pages", {}).get("vaults", [])
    if catalog.get("origin"):
        entries.append(catalog["origin"])

    return [
        Opportunity(protocol=e["protocol"], product=e["product"], url=e.get("url", ""))
        for e in entries
    ]


class Aggregator:
    """Fans out to all sources and joins their results.

    Every source is given the chance to finish; a failing source contributes
    nothing and is recorded in the per-source status and counters.
    """

    def __init__(self, sources: Optional[Sequence] = None, max_workers: int = MAX_WORKERS):
        """Initialize the aggregator.

        Args:
            sources: Source classes (or factories) to instantiate per assembly.
                Defaults to every registered source.
            max_workers: Upper bound on concurrently running sources.
        """
        self.sources = list(SOURCES if sources is None else sources)
        self.max_workers = max_workers
        self._counters: Dict[str, Dict[str, int]] = {}
        self._lock = threading.Lock()

    def assemble(self) -> AggregateResult:
        """Fetch every source concurrently and concatenate the results."""
        instances = [factory() for factory in self.sources]
        if not instances:
            return AggregateResult.now(opportunities=fallback_opportunities(), fallback=True)

        workers = max(1, min(self.max_workers, len(instances)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(self._run_source, instances))

        opportunities: List[Opportunity] = []
        statuses: List[SourceStatus] = []
        for found, status in outcomes:
            opportunities.extend(found)
            statuses.append(status)
            self._count(status)

        fallback = not opportunities
        if fallback:
            logger.warning("No source returned data, serving fallback catalog")
            opportunities = fallback_opportunities()

        failed = [s.name for s in statuses if not s.ok]
        logger.info(
            "Assembled %d opportunities from %d sources (%d failed%s)",
            len(opportunities),
            len(statuses),
            len(failed),
            f": {', '.join(failed)}" if failed else "",
        )

        return AggregateResult.now(
            opportunities=opportunities,
            sources=statuses,
            fallback=fallback,
        )

    def _run_source(self, source: BaseSource):
        name = getattr(source, "name", "") or type(source).__name__
        start = time.monotonic()
        try:
            found = list(source.fetch())
            error = getattr(source, "last_error", None)
        except Exception as e:
            logger.exception("%s raised past its boundary", name)
            found, error = [], f"{type(e).__name__}: {e}"

        elapsed_ms = (time.monotonic() - start) * 1000
        status = SourceStatus(
            name=name,
            ok=error is None,
            count=len(found),
            error=error,
            elapsed_ms=elapsed_ms,
        )
        return found, status

    def _count(self, status: SourceStatus) -> None:
        with self._lock:
            counter = self._counters.setdefault(status.name, {"success": 0, "failure": 0})
            counter["success" if status.ok else "failure"] += 1

    def counters(self) -> Dict[str, Dict[str, int]]:
        """Cumulative success/failure counts per source."""
        with self._lock:
            return {name: dict(c) for name, c in self._counters.items()}


_default_aggregator: Optional[Aggregator] = None


def get_aggregator() -> Aggregator:
    """Return the process-wide aggregator over the registered sources."""
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = Aggregator()
    return _default_aggregator


def get_yields() -> AggregateResult:
    """Assemble the current yields with the default sources."""
    return get_aggregator().assemble()
