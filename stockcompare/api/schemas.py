from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from stockcompare.domain.models import (
    AggregatedPosition,
    AggregationSnapshot,
    Position,
    PositionStatus,
    TreemapCell,
)
from stockcompare.domain.services.portfolio_totals import PortfolioTotals


class PositionIn(BaseModel):
    stock: str = Field(..., min_length=1)
    quantity: float = Field(0, ge=0)
    price: float = Field(0, ge=0)
    market_value: Optional[float] = Field(None, ge=0)

    def to_domain(self) -> Position:
        return Position(
            symbol=self.stock,
            quantity=self.quantity,
            cost_basis_price=self.price,
            cost_basis_market_value=self.market_value or 0.0,
        )


class PositionOut(BaseModel):
    stock: str
    quantity: float
    price: float
    market_value: float

    @classmethod
    def from_domain(cls, position: Position) -> "PositionOut":
        return cls(
            stock=position.symbol,
            quantity=position.quantity,
            price=position.cost_basis_price,
            market_value=position.cost_basis_market_value,
        )


class CompareRequest(BaseModel):
    positions: List[PositionIn]
    period: str = "csv"
    # Runs sharing a session supersede each other; omit for an isolated run
    session_id: Optional[str] = Field(None, min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_.:-]+$")


class ComparisonEntry(BaseModel):
    stock: str = Field(..., min_length=1)
    quantity: float = Field(..., ge=0)
    price: float = Field(..., ge=0)
    market_value: float = Field(..., ge=0)
    status: str = Field("resolved", pattern="^(pending|resolved|error)$")
    current_price: Optional[float] = None
    comparison_price: Optional[float] = None
    comparison_date: Optional[date] = None
    profit_loss: Optional[float] = None
    percent_change: Optional[float] = None
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: AggregatedPosition) -> "ComparisonEntry":
        return cls(
            stock=entry.symbol,
            quantity=entry.quantity,
            price=entry.position.cost_basis_price,
            market_value=entry.market_value,
            status=entry.status.value,
            current_price=entry.current_price,
            comparison_price=entry.comparison_price,
            comparison_date=entry.comparison_date,
            profit_loss=entry.profit_loss,
            percent_change=entry.percent_change,
            error=entry.error,
        )

    def to_domain(self) -> AggregatedPosition:
        status = PositionStatus(self.status) if not self.error else PositionStatus.ERROR
        return AggregatedPosition(
            position=Position(
                symbol=self.stock,
                quantity=self.quantity,
                cost_basis_price=self.price,
                cost_basis_market_value=self.market_value,
            ),
            status=status,
            current_price=self.current_price,
            comparison_price=self.comparison_price,
            comparison_date=self.comparison_date,
            profit_loss=self.profit_loss,
            percent_change=self.percent_change,
            error=self.error,
        )


class TreemapRequest(BaseModel):
    entries: List[ComparisonEntry]


class TreemapCellOut(BaseModel):
    stock: str
    market_value: float
    percentage: float
    size: float
    size_class: str
    col_span: int
    row_span: int
    is_positive: bool
    percent_change: Optional[float] = None
    current_price: Optional[float] = None

    @classmethod
    def from_domain(cls, cell: TreemapCell) -> "TreemapCellOut":
        return cls(
            stock=cell.symbol,
            market_value=cell.market_value,
            percentage=cell.percentage_of_portfolio,
            size=cell.display_size,
            size_class=cell.size_class.value,
            col_span=cell.col_span,
            row_span=cell.row_span,
            is_positive=cell.is_positive,
            percent_change=cell.percent_change,
            current_price=cell.current_price,
        )


class TotalsOut(BaseModel):
    base_value: float
    current_value: float
    profit_loss: float
    percent_change: float
    resolved_count: int
    pending_count: int
    errored_symbols: List[str]

    @classmethod
    def from_domain(cls, totals: PortfolioTotals) -> "TotalsOut":
        return cls(
            base_value=round(totals.base_value, 2),
            current_value=round(totals.current_value, 2),
            profit_loss=round(totals.profit_loss, 2),
            percent_change=round(totals.percent_change, 2),
            resolved_count=totals.resolved_count,
            pending_count=totals.pending_count,
            errored_symbols=totals.errored_symbols,
        )


class SnapshotOut(BaseModel):
    generation: int
    period: str
    completed: int
    total: int
    done: bool
    stocks: List[ComparisonEntry]
    treemap: List[TreemapCellOut]
    totals: TotalsOut

    @classmethod
    def build(
        cls,
        snapshot: AggregationSnapshot,
        cells: List[TreemapCell],
        totals: PortfolioTotals,
    ) -> "SnapshotOut":
        return cls(
            generation=snapshot.generation,
            period=snapshot.period,
            completed=snapshot.completed,
            total=snapshot.total,
            done=snapshot.done,
            stocks=[ComparisonEntry.from_domain(e) for e in snapshot.entries],
            treemap=[TreemapCellOut.from_domain(c) for c in cells],
            totals=TotalsOut.from_domain(totals),
        )


class StockPriceResponse(BaseModel):
    ticker: str
    currentPrice: float
    currency: str
    marketState: Optional[str] = None


class CompareResponse(BaseModel):
    ticker: str
    currentPrice: Optional[float]
    comparisonPrice: Optional[float]
    period: str
    comparisonDate: Optional[date] = None


class HistoryPoint(BaseModel):
    date: date
    price: float


class HistoryMeta(BaseModel):
    currency: str
    exchangeName: Optional[str] = None
    symbol: str
    currentPrice: Optional[float] = None


class HistoryResponse(BaseModel):
    ticker: str
    data: List[HistoryPoint]
    meta: HistoryMeta


class StatsResponse(BaseModel):
    ticker: str
    fiftyTwoWeekHigh: Optional[float]
    fiftyTwoWeekLow: Optional[float]
    currentPrice: Optional[float]
    volume: Optional[float]
    avgVolume: Optional[float]


class IndexQuoteOut(BaseModel):
    symbol: str
    name: str
    price: float
    change: float
    changePercent: float
    error: bool = False


class SearchResultOut(BaseModel):
    symbol: str
    name: str
    exchange: str
    type: str


class CompanyProfileOut(BaseModel):
    ticker: str
    name: str
    logo: str
    country: str
    currency: str
    exchange: str
    industry: str
    ipo: str
    marketCap: float
    phone: str
    shareOutstanding: float
    weburl: str


class NewsArticleOut(BaseModel):
    headline: str
    summary: str
    source: str
    url: str
    image: str
    published_at: Optional[datetime] = Field(None, serialization_alias="datetime")


class WatchlistPayload(BaseModel):
    positions: List[PositionIn] = Field(default_factory=list)

