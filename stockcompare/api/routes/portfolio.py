"""
Portfolio routes - CSV upload, period comparison and treemap layout.
"""

import logging
from typing import AsyncIterator, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from stockcompare.api.deps import get_aggregator_registry, get_treemap_engine
from stockcompare.api.schemas import (
    CompareRequest,
    PositionOut,
    SnapshotOut,
    TreemapCellOut,
    TreemapRequest,
)
from stockcompare.domain.errors import InvalidInputError
from stockcompare.domain.models import AggregationSnapshot, ComparisonPeriod, Position
from stockcompare.domain.services.period_anchor_resolver import parse_period
from stockcompare.domain.services.portfolio_aggregator import AggregatorRegistry
from stockcompare.domain.services.portfolio_totals import calculate_totals
from stockcompare.domain.services.treemap_layout_engine import TreemapLayoutEngine
from stockcompare.services.portfolio_loader import PortfolioFileError, parse_portfolio_csv

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_positions(request: CompareRequest) -> List[Position]:
    try:
        return [p.to_domain() for p in request.positions]
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _to_period(code: str) -> ComparisonPeriod:
    try:
        return parse_period(code)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _render(snapshot: AggregationSnapshot, engine: TreemapLayoutEngine) -> SnapshotOut:
    return SnapshotOut.build(
        snapshot,
        engine.layout(snapshot.entries),
        calculate_totals(snapshot.entries),
    )


@router.post("/upload", response_model=List[PositionOut])
async def upload_portfolio(request: Request):
    """
    Parse a portfolio CSV sent as the raw request body.

    Columns: stock, quantity, price and optionally market_value.
    """
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")

    try:
        positions = parse_portfolio_csv(text)
    except (PortfolioFileError, InvalidInputError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    logger.info("Uploaded portfolio with %d positions", len(positions))
    return [PositionOut.from_domain(p) for p in positions]


@router.post("/compare", response_model=SnapshotOut)
async def compare_portfolio(
    payload: CompareRequest,
    registry: AggregatorRegistry = Depends(get_aggregator_registry),
    engine: TreemapLayoutEngine = Depends(get_treemap_engine),
):
    """
    Resolve every position and return the completed snapshot.

    Without a session_id the run is isolated from every other request.
    """
    positions = _to_positions(payload)
    period = _to_period(payload.period)

    snapshot = await registry.get(payload.session_id).run(positions, period)
    return _render(snapshot, engine)


@router.post("/compare/stream")
async def stream_portfolio_comparison(
    payload: CompareRequest,
    registry: AggregatorRegistry = Depends(get_aggregator_registry),
    engine: TreemapLayoutEngine = Depends(get_treemap_engine),
):
    """
    Progressive comparison as newline-delimited JSON.

    One line per snapshot: all-pending first, then one per settled position.
    The stream stops early when the same session starts a newer comparison.
    """
    positions = _to_positions(payload)
    period = _to_period(payload.period)
    aggregator = registry.get(payload.session_id)

    async def lines() -> AsyncIterator[str]:
        async for snapshot in aggregator.aggregate(positions, period):
            yield _render(snapshot, engine).model_dump_json() + "\n"

    return StreamingResponse(lines(), media_type="application/x-ndjson")


@router.post("/treemap", response_model=List[TreemapCellOut])
async def portfolio_treemap(
    payload: TreemapRequest,
    engine: TreemapLayoutEngine = Depends(get_treemap_engine),
):
    """Lay out already-resolved entries; errored or unpriced entries are skipped."""
    try:
        entries = [e.to_domain() for e in payload.entries]
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return [TreemapCellOut.from_domain(c) for c in engine.layout(entries)]
