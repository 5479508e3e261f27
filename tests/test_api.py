import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_llm, get_market_provider
from app.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from app.main import app


@pytest.fixture
def client(provider, fake_llm):
    app.dependency_overrides[get_market_provider] = lambda: provider
    app.dependency_overrides[get_llm] = lambda: fake_llm
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/api/v1/health").json() == {"status": "healthy"}


def test_predict_stock_camel_case_contract(client):
    response = client.post("/api/v1/predict-stock", json={"ticker": " test "})

    assert response.status_code == 200
    body = response.json()
    assert body["ticker"] == "TEST"
    assert body["currentPrice"] == 159.0
    assert body["predictionSource"] == "model"
    assert body["prediction"]["predictedPrice"] == 131.5
    assert body["prediction"]["keySignals"] == ["RSI rising", "MACD above signal"]
    assert set(body["indicators"]) == {"sma20", "sma50", "ema12", "ema26", "rsi14", "macd"}
    assert set(body["indicators"]["macd"]) == {"line", "signal", "histogram"}
    assert body["momentum"]["day7Pct"] is not None
    assert len(body["chartData"]) == 60
    assert body["meta"]["companyName"] == "TEST Corp"


def test_predict_stock_chart_days(client):
    body = client.post("/api/v1/predict-stock", json={"ticker": "aapl", "chartDays": 20}).json()
    assert len(body["chartData"]) == 20


@pytest.mark.parametrize("payload", [{}, {"ticker": "   "}, {"ticker": "AAPL", "chartDays": 45}])
def test_predict_stock_rejects_bad_requests(client, payload):
    assert client.post("/api/v1/predict-stock", json=payload).status_code == 422


def test_predict_stock_price_data_failure_is_500(client, provider):
    provider.series_error = UpstreamUnavailableError("Yahoo Finance", "TEST", "HTTP 404")
    response = client.post("/api/v1/predict-stock", json={"ticker": "TEST"})
    assert response.status_code == 500
    assert response.json() == {"error": "Unable to fetch stock data"}


def test_unexpected_exception_is_generic_500(client, provider):
    provider.series_error = RuntimeError("division by zero deep inside")
    response = client.post("/api/v1/predict-stock", json={"ticker": "TEST"})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_fundamentals_mock_on_upstream_failure(client, provider):
    provider.info_error = UpstreamUnavailableError("Yahoo Finance", "TEST", "HTTP 401")
    body = client.post("/api/v1/stock-fundamentals", json={"ticker": "test"}).json()
    assert body["isMockData"] is True
    assert body["aiScore"] == 100
    assert body["scoreColor"] == "green"
    assert [m["metric"] for m in body["radarData"]][0] == "EPS Growth"


def test_financials_unavailable_on_malformed_upstream(client, provider):
    provider.info_error = UpstreamMalformedError("Yahoo Finance", "TEST", "Financial data format unavailable")
    response = client.post("/api/v1/company-financials", json={"ticker": "TEST"})
    assert response.status_code == 200
    assert response.json() == {
        "ticker": "TEST",
        "unavailable": True,
        "error": "Financial data format unavailable",
    }


def test_news_endpoint(client):
    body = client.post("/api/v1/stock-news", json={"ticker": "TEST"}).json()
    assert body["ticker"] == "TEST"
    assert {"headline", "publisher", "sentiment", "sentimentScore"} <= set(body["news"][0])


def test_ownership_endpoint(client):
    body = client.post("/api/v1/stock-ownership", json={"ticker": "TEST"}).json()
    assert body["shareholding"]["insiders"] == 7.12
    assert body["pieData"][0]["color"] == "#3b82f6"


def test_stock_report_partial_failure(client, provider):
    provider.news_error = UpstreamUnavailableError("Yahoo Finance", "TEST", "timeout")
    body = client.post("/api/v1/stock-report", json={"ticker": "TEST"}).json()
    assert body["news"] is None
    assert body["unavailableSections"] == ["news"]
    assert body["financials"]["marketCap"] == "$2.50T"
    assert body["prediction"]["ticker"] == "TEST"
