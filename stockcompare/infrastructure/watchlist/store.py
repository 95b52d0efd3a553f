"""
Watchlist key-value stores.

The comparison engine never touches these; routes load positions from a store
and pass them in.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Protocol

from stockcompare.domain.models import Position

logger = logging.getLogger(__name__)


class WatchlistStore(Protocol):
    async def load(self, key: str) -> List[Position]:
        ...

    async def save(self, key: str, positions: List[Position]) -> None:
        ...


class InMemoryWatchlistStore:
    def __init__(self):
        self._data: Dict[str, List[Position]] = {}

    async def load(self, key: str) -> List[Position]:
        return list(self._data.get(key, []))

    async def save(self, key: str, positions: List[Position]) -> None:
        self._data[key] = list(positions)


class JsonFileWatchlistStore:
    """All watchlists in one JSON document: {key: [position, ...]}."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_all(self) -> Dict[str, list]:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            return json.load(f) or {}

    def _write_all(self, data: Dict[str, list]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)

    async def load(self, key: str) -> List[Position]:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
        return [
            Position(
                symbol=row["symbol"],
                quantity=float(row.get("quantity", 0)),
                cost_basis_price=float(row.get("cost_basis_price", 0)),
                cost_basis_market_value=float(row.get("cost_basis_market_value", 0)),
            )
            for row in data.get(key, [])
        ]

    async def save(self, key: str, positions: List[Position]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            data[key] = [asdict(p) for p in positions]
            await asyncio.to_thread(self._write_all, data)
        logger.info("Saved watchlist %s (%d positions)", key, len(positions))
