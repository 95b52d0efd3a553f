import pytest

from conftest import NY
from stockcompare.domain.services.comparison_resolver import ComparisonResolver
from stockcompare.infrastructure.market_data.types import MarketDataUnavailable


@pytest.mark.asyncio
@pytest.mark.integration
async def test_current_price(client):
    resp = await client.get("/api/v1/stock/aapl")
    assert resp.status_code == 200
    data = resp.json()
    assert data["ticker"] == "AAPL"
    assert data["currentPrice"] == 180.0
    assert data["currency"] == "USD"
    assert data["marketState"] == "REGULAR"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_symbol_passes_through_not_found(client):
    resp = await client.get("/api/v1/stock/MSFT")
    assert resp.status_code == 404
    assert "MSFT" in resp.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_history_drops_null_closes(client, stub_provider):
    resp = await client.get("/api/v1/stock/AAPL/history", params={"range": "3mo"})
    assert resp.status_code == 200
    data = resp.json()
    assert [p["date"] for p in data["data"]] == [
        "2024-05-10", "2024-05-13", "2024-05-14", "2024-05-16", "2024-06-13",
    ]
    assert data["data"][2]["price"] == 160.0
    assert data["meta"]["currentPrice"] == 180.0
    assert data["meta"]["exchangeName"] == "NMS"
    assert stub_provider.series_calls() == [("series", "AAPL", "3mo", "1d")]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_defaults_to_cost_basis_period(client, stub_provider):
    resp = await client.get("/api/v1/stock/AAPL/compare")
    assert resp.status_code == 200
    data = resp.json()
    assert data == {
        "ticker": "AAPL",
        "currentPrice": 180.0,
        "comparisonPrice": None,
        "period": "csv",
        "comparisonDate": None,
    }
    assert stub_provider.series_calls() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_failure_is_not_found(client):
    resp = await client.get("/api/v1/stock/MSFT/compare", params={"period": "csv"})
    assert resp.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_passes_through_upstream_status(app, client, stub_provider):
    class RateLimited(type(stub_provider)):
        async def get_current_price(self, symbol):
            raise MarketDataUnavailable(f"Failed to fetch data for {symbol}", symbol=symbol, status_code=429)

    app.state.comparison_resolver = ComparisonResolver(RateLimited(), tz=NY)

    resp = await client.get("/api/v1/stock/AAPL/compare", params={"period": "csv"})
    assert resp.status_code == 429
    assert resp.json()["detail"] == "Failed to fetch data for AAPL"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_zero_current_price_is_rejected(client, stub_provider):
    stub_provider.prices["AAPL"] = 0.0

    resp = await client.get("/api/v1/stock/AAPL/compare", params={"period": "csv"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Invalid data format for AAPL"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_blank_period_is_bad_request(client):
    resp = await client.get("/api/v1/stock/AAPL/compare", params={"period": " "})
    assert resp.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stats(client):
    resp = await client.get("/api/v1/stock/AAPL/stats")
    assert resp.status_code == 200
    data = resp.json()
    assert data["fiftyTwoWeekHigh"] == 179.0
    assert data["fiftyTwoWeekLow"] == 158.0
    assert data["volume"] == 5000
    assert data["avgVolume"] == 3000


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stats_failure(client):
    resp = await client.get("/api/v1/stock/MSFT/stats")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to fetch stats for MSFT"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_market_overview_flags_missing_indices(client):
    resp = await client.get("/api/v1/market")
    assert resp.status_code == 200
    indices = resp.json()["indices"]
    assert [i["symbol"] for i in indices] == ["^GSPC", "^IXIC", "^DJI"]
    assert all(i["error"] for i in indices)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search(client):
    resp = await client.get("/api/v1/search", params={"q": "apple"})
    assert resp.status_code == 200
    assert resp.json()["results"][0]["symbol"] == "AAPL"

    empty = await client.get("/api/v1/search", params={"q": ""})
    assert empty.json() == {"results": []}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_company_without_api_key(client):
    resp = await client.get("/api/v1/company/AAPL")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Finnhub API key not configured"

    news = await client.get("/api/v1/company/AAPL/news")
    assert news.status_code == 500
