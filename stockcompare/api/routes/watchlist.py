"""
Watchlist routes - persist and reload a named list of positions.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from stockcompare.api.deps import get_watchlist_store
from stockcompare.api.schemas import PositionOut, WatchlistPayload
from stockcompare.domain.errors import InvalidInputError
from stockcompare.infrastructure.watchlist.store import WatchlistStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def get_watchlist(key: str = Query("default", min_length=1), store: WatchlistStore = Depends(get_watchlist_store)):
    positions = await store.load(key)
    return {"key": key, "positions": [PositionOut.from_domain(p) for p in positions]}


@router.put("")
async def save_watchlist(
    payload: WatchlistPayload,
    key: str = Query("default", min_length=1),
    store: WatchlistStore = Depends(get_watchlist_store),
):
    try:
        positions = [p.to_domain() for p in payload.positions]
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    await store.save(key, positions)
    return {"key": key, "positions": [PositionOut.from_domain(p) for p in positions]}
