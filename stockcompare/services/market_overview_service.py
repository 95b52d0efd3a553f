import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from stockcompare.domain.errors import DataUnavailableError
from stockcompare.infrastructure.market_data.types import SeriesProvider

logger = logging.getLogger(__name__)

MAJOR_INDICES: Tuple[Tuple[str, str], ...] = (
    ("^GSPC", "S&P 500"),
    ("^IXIC", "NASDAQ"),
    ("^DJI", "DOW"),
)


@dataclass(frozen=True)
class IndexQuote:
    symbol: str
    name: str
    price: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    error: bool = False


class MarketOverviewService:
    """
    Daily change of the major indices.
    One failing index is flagged and does not affect the others.
    """

    def __init__(self, provider: SeriesProvider, indices: Sequence[Tuple[str, str]] = MAJOR_INDICES):
        self.provider = provider
        self.indices = indices

    async def _index_quote(self, symbol: str, name: str) -> IndexQuote:
        try:
            series = await self.provider.get_daily_series(symbol, "5d", "1d")
        except DataUnavailableError as exc:
            logger.error(f"Error fetching {name}: {exc}")
            return IndexQuote(symbol=symbol, name=name, error=True)

        current: Optional[float] = series.current_price_hint
        closes = [p.close for p in series.valid_points()]
        # chartPreviousClose is the close before the fetched window, not the prior session
        previous: Optional[float] = closes[-2] if len(closes) > 1 else series.previous_close
        if current is None or not previous:
            logger.warning("Incomplete quote for %s", name)
            return IndexQuote(symbol=symbol, name=name, error=True)

        change = current - previous
        return IndexQuote(
            symbol=symbol,
            name=name,
            price=current,
            change=change,
            change_percent=(change / previous) * 100,
        )

    async def get_overview(self) -> List[IndexQuote]:
        return list(
            await asyncio.gather(*(self._index_quote(symbol, name) for symbol, name in self.indices))
        )
