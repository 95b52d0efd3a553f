"""
PORTFOLIO AGGREGATOR
Fan out comparison lookups for every position and publish progressively
complete snapshots.

RESPONSIBILITIES:
- Start one resolver call per position, all concurrently
- Publish a full snapshot as each position settles (completion order)
- Derive profit/loss and percent change per resolved position
- Isolate failures to the affected position

Each run is tagged with a generation. Starting a new run supersedes the old
one: its in-flight lookups are cancelled and any result that still arrives for
it is dropped instead of overwriting newer state.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from datetime import datetime
from typing import AsyncIterator, Dict, Iterable, Optional, Tuple, Union

from stockcompare.domain.models import (
    AggregatedPosition,
    AggregationSnapshot,
    ComparisonPeriod,
    ComparisonResult,
    Position,
    PositionStatus,
)
from stockcompare.domain.services.comparison_resolver import ComparisonResolver
from stockcompare.domain.services.period_anchor_resolver import parse_period

logger = logging.getLogger(__name__)


def derive_entry(position: Position, result: ComparisonResult) -> AggregatedPosition:
    """Join a position with its comparison result."""
    if not result.ok:
        return AggregatedPosition(
            position=position,
            status=PositionStatus.ERROR,
            error=result.error or f"No price data for {position.symbol}",
        )

    current = result.current_price
    base = result.comparison_price if result.comparison_price is not None else position.cost_basis_price
    profit_loss = (current - base) * position.quantity
    # zero base is degenerate, not an error
    percent_change = ((current - base) / base) * 100 if base != 0 else 0.0

    return AggregatedPosition(
        position=position,
        status=PositionStatus.RESOLVED,
        current_price=current,
        comparison_price=result.comparison_price,
        comparison_date=result.comparison_date,
        profit_loss=profit_loss,
        percent_change=percent_change,
    )


class PortfolioAggregator:
    """
    Concurrent, generation-tagged portfolio comparison.

    ``latest`` is the only shared state and is replaced wholesale, never
    mutated, so readers always see a consistent snapshot.
    """

    def __init__(self, resolver: ComparisonResolver):
        self.resolver = resolver
        self._generation = 0
        self._latest: Optional[AggregationSnapshot] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest(self) -> Optional[AggregationSnapshot]:
        return self._latest

    def _publish(self, snapshot: AggregationSnapshot) -> bool:
        if snapshot.generation != self._generation:
            return False
        self._latest = snapshot
        return True

    async def _resolve_one(
        self,
        index: int,
        position: Position,
        period: ComparisonPeriod,
        now: Optional[datetime],
    ) -> Tuple[int, AggregatedPosition]:
        try:
            result = await self.resolver.resolve(position.symbol, period, now)
            return index, derive_entry(position, result)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure resolving %s", position.symbol)
            return index, AggregatedPosition(position=position).failed(f"Failed to resolve {position.symbol}: {exc}")

    async def aggregate(
        self,
        positions: Iterable[Position],
        period: Union[str, ComparisonPeriod],
        now: Optional[datetime] = None,
    ) -> AsyncIterator[AggregationSnapshot]:
        """
        Stream snapshots of one aggregation run.

        The first snapshot has every entry pending; one further snapshot follows
        per settled position. The stream ends early if a newer run starts.
        """
        resolved_period = parse_period(period)
        self._generation += 1
        generation = self._generation
        entries = tuple(AggregatedPosition(position=p) for p in positions)

        snapshot = AggregationSnapshot(generation=generation, period=resolved_period.value, entries=entries)
        self._publish(snapshot)
        logger.info(
            "Aggregation %d started: %d positions, period=%s",
            generation, len(entries), resolved_period.value,
        )
        yield snapshot

        if not entries:
            return

        tasks: Dict[asyncio.Task, int] = {}
        for index, entry in enumerate(entries):
            task = asyncio.create_task(self._resolve_one(index, entry.position, resolved_period, now))
            tasks[task] = index

        try:
            for next_done in asyncio.as_completed(list(tasks)):
                index, entry = await next_done
                if generation != self._generation:
                    logger.info(
                        "Aggregation %d superseded by %d, discarding %s",
                        generation, self._generation, entry.symbol,
                    )
                    return
                snapshot = snapshot.with_entry(index, entry)
                self._publish(snapshot)
                yield snapshot
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        failed = sum(1 for e in snapshot.entries if e.status is PositionStatus.ERROR)
        logger.info(
            "Aggregation %d complete: %d resolved, %d failed",
            generation, snapshot.total - failed, failed,
        )

    async def run(
        self,
        positions: Iterable[Position],
        period: Union[str, ComparisonPeriod],
        now: Optional[datetime] = None,
    ) -> AggregationSnapshot:
        """Drain one aggregation run and return its last snapshot."""
        final: Optional[AggregationSnapshot] = None
        async for snapshot in self.aggregate(positions, period, now):
            final = snapshot
        return final  # type: ignore[return-value]


class AggregatorRegistry:
    """
    One aggregator per client session so a new request supersedes the old.

    Requests without a session get a private aggregator that nothing else can
    supersede. Sessions are kept least-recently-used first and the oldest is
    dropped once ``max_sessions`` is exceeded.
    """

    def __init__(self, resolver: ComparisonResolver, max_sessions: int = 256):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.resolver = resolver
        self.max_sessions = max_sessions
        self._aggregators: "OrderedDict[str, PortfolioAggregator]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._aggregators)

    def get(self, session_id: Optional[str] = None) -> PortfolioAggregator:
        if session_id is None:
            return PortfolioAggregator(self.resolver)

        aggregator = self._aggregators.get(session_id)
        if aggregator is None:
            aggregator = PortfolioAggregator(self.resolver)
            self._aggregators[session_id] = aggregator
            while len(self._aggregators) > self.max_sessions:
                evicted, _ = self._aggregators.popitem(last=False)
                logger.debug("Evicted aggregator for session %s", evicted)
        else:
            self._aggregators.move_to_end(session_id)
        return aggregator
