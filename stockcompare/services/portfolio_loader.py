# stockcompare/services/portfolio_loader.py

import csv
import io
import logging
from typing import List

from stockcompare.domain.errors import InvalidInputError, StockCompareError
from stockcompare.domain.models import Position

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("stock", "quantity", "price")
NUMERIC_COLUMNS = ("quantity", "price", "market_value")


class PortfolioFileError(StockCompareError):
    """Uploaded portfolio CSV could not be used"""


def _to_number(value) -> float:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0


def parse_portfolio_csv(text: str) -> List[Position]:
    """
    Parse a portfolio CSV with a header row.

    Columns: stock, quantity, price, market_value (optional). Unparseable
    numbers are read as 0; market_value defaults to quantity x price.
    """
    reader = csv.DictReader(io.StringIO(text or ""), skipinitialspace=True)
    fieldnames = [name.strip() for name in (reader.fieldnames or [])]
    reader.fieldnames = fieldnames

    rows = [row for row in reader if any((v or "").strip() for v in row.values() if isinstance(v, str))]
    if not rows:
        raise PortfolioFileError("CSV file is empty")

    missing = [col for col in REQUIRED_COLUMNS if col not in fieldnames]
    if missing:
        raise PortfolioFileError(f"Missing required columns: {', '.join(missing)}")

    positions: List[Position] = []
    for line_no, row in enumerate(rows, start=2):
        numbers = {col: _to_number(row.get(col)) for col in NUMERIC_COLUMNS}
        try:
            positions.append(
                Position(
                    symbol=row.get("stock"),
                    quantity=numbers["quantity"],
                    cost_basis_price=numbers["price"],
                    cost_basis_market_value=numbers["market_value"],
                )
            )
        except InvalidInputError as exc:
            raise PortfolioFileError(f"Row {line_no}: {exc}") from exc

    logger.info("Loaded %d positions from CSV", len(positions))
    return positions
