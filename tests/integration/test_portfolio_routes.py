import asyncio
import json

import pytest

PORTFOLIO = [
    {"stock": "AAPL", "quantity": 10, "price": 150},
    {"stock": "MSFT", "quantity": 5, "price": 300},
]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_csv(client):
    body = "stock,quantity,price,market_value\nAAPL,10,150,\nmsft,5,300,1500\n"
    resp = await client.post("/api/v1/portfolio/upload", content=body, headers={"Content-Type": "text/csv"})
    assert resp.status_code == 200
    assert resp.json() == [
        {"stock": "AAPL", "quantity": 10.0, "price": 150.0, "market_value": 1500.0},
        {"stock": "MSFT", "quantity": 5.0, "price": 300.0, "market_value": 1500.0},
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_rejects_bad_csv(client):
    resp = await client.post("/api/v1/portfolio/upload", content="stock,qty\nAAPL,1\n")
    assert resp.status_code == 400
    assert "Missing required columns" in resp.json()["detail"]

    empty = await client.post("/api/v1/portfolio/upload", content="")
    assert empty.status_code == 400
    assert empty.json()["detail"] == "CSV file is empty"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_returns_final_snapshot(client):
    resp = await client.post("/api/v1/portfolio/compare", json={"positions": PORTFOLIO})
    assert resp.status_code == 200
    data = resp.json()

    assert data["done"] is True
    assert data["period"] == "csv"
    aapl, msft = data["stocks"]
    assert aapl["status"] == "resolved"
    assert aapl["profit_loss"] == pytest.approx(300.0)
    assert aapl["percent_change"] == pytest.approx(20.0)
    assert msft["status"] == "error"
    assert msft["profit_loss"] is None

    assert [c["stock"] for c in data["treemap"]] == ["AAPL"]
    assert data["treemap"][0]["percentage"] == pytest.approx(100.0)
    assert data["totals"]["errored_symbols"] == ["MSFT"]
    assert data["totals"]["profit_loss"] == pytest.approx(300.0)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_rejects_blank_symbol(client):
    resp = await client.post(
        "/api/v1/portfolio/compare",
        json={"positions": [{"stock": "  ", "quantity": 1, "price": 1}]},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_rejects_negative_quantity(client):
    resp = await client.post(
        "/api/v1/portfolio/compare",
        json={"positions": [{"stock": "AAPL", "quantity": -1, "price": 1}]},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_stream_emits_progressive_snapshots(client):
    resp = await client.post(
        "/api/v1/portfolio/compare/stream",
        json={"positions": PORTFOLIO, "period": "csv", "session_id": "s1"},
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/x-ndjson")

    snapshots = [json.loads(line) for line in resp.text.splitlines() if line]
    assert [s["completed"] for s in snapshots] == [0, 1, 2]
    assert all(e["status"] == "pending" for e in snapshots[0]["stocks"])
    assert snapshots[0]["treemap"] == []
    assert snapshots[-1]["done"] is True
    assert {s["generation"] for s in snapshots} == {1}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_treemap_from_entries(client):
    entries = [
        {"stock": "AAPL", "quantity": 10, "price": 150, "market_value": 1500,
         "current_price": 180, "percent_change": 20},
        {"stock": "KO", "quantity": 10, "price": 50, "market_value": 500,
         "current_price": 45, "percent_change": -10},
        {"stock": "MSFT", "quantity": 5, "price": 300, "market_value": 1500,
         "status": "error", "error": "No data found for MSFT"},
    ]
    resp = await client.post("/api/v1/portfolio/treemap", json={"entries": entries})
    assert resp.status_code == 200
    cells = resp.json()
    assert [c["stock"] for c in cells] == ["AAPL", "KO"]
    assert cells[0]["percentage"] == pytest.approx(75.0)
    assert cells[0]["size_class"] == "large"
    assert cells[1]["is_positive"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_concurrent_compares_without_session_both_complete(client, stub_provider):
    stub_provider.delays["AAPL"] = 0.05
    body = {"positions": PORTFOLIO, "period": "csv"}

    first, second = await asyncio.gather(
        client.post("/api/v1/portfolio/compare", json=body),
        client.post("/api/v1/portfolio/compare", json=body),
    )

    for resp in (first, second):
        assert resp.status_code == 200
        data = resp.json()
        assert data["done"] is True
        assert data["completed"] == 2
        assert [s["status"] for s in data["stocks"]] == ["resolved", "error"]
        assert [c["stock"] for c in data["treemap"]] == ["AAPL"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compare_rejects_oversized_session_id(client):
    resp = await client.post(
        "/api/v1/portfolio/compare",
        json={"positions": PORTFOLIO, "session_id": "x" * 65},
    )
    assert resp.status_code == 422
