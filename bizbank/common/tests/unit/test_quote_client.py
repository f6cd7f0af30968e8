import pytest
import asyncio
import random
import httpx
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from bizbank.common.services.quote_client import (
    FinnhubClient,
    QuoteFetcher,
    RandomWalkSparkline,
    SparklineSource,
    to_decimal,
)
from bizbank.common.utils.exceptions import QuoteProviderError

QUOTE_PAYLOAD = {"c": 301.25, "d": 2.5, "dp": 0.8368, "h": 303.0, "l": 298.1, "o": 299.0, "pc": 298.75, "t": 1705309200}


def _mock_http(mock_get_retry_client, json_payload=None, raise_for_status=None):
    """get_retry_client() 컨텍스트 매니저가 돌려주는 클라이언트를 구성합니다."""
    mock_response = MagicMock()
    mock_response.raise_for_status = MagicMock(side_effect=raise_for_status)
    mock_response.json.return_value = json_payload

    mock_client = AsyncMock()
    mock_client.get.return_value = mock_response
    mock_get_retry_client.return_value = AsyncMock()
    mock_get_retry_client.return_value.__aenter__.return_value = mock_client
    return mock_client


class FixedSparkline(SparklineSource):
    def generate(self, price, change):
        return [1.0, 2.0, 3.0]


@pytest.fixture
def finnhub_client(market_config):
    return FinnhubClient(market_config)

@pytest.fixture
def mock_client():
    client = MagicMock(spec=FinnhubClient)
    client.get_quote = AsyncMock(return_value=dict(QUOTE_PAYLOAD))
    client.get_company_profile = AsyncMock(return_value={})
    return client

@pytest.fixture
def fetcher(mock_client, market_config):
    return QuoteFetcher(client=mock_client, sparkline_source=FixedSparkline(), config=market_config)


# --- to_decimal ---

@pytest.mark.parametrize("value, expected", [
    (301.25, Decimal("301.2500")),
    ("12.345678", Decimal("12.3457")),
    (0, Decimal("0.0000")),
    (None, None),
    ("n/a", None),
])
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected


# --- FinnhubClient ---

@pytest.mark.asyncio
@patch('bizbank.common.services.quote_client.get_retry_client')
async def test_fetch_quote_success(mock_get_retry_client, finnhub_client):
    """/quote 호출 시 토큰을 쿼리 파라미터로 전달"""
    # Given
    mock_client = _mock_http(mock_get_retry_client, json_payload=QUOTE_PAYLOAD)

    # When
    result = await finnhub_client.get_quote("AAPL")

    # Then
    assert result == QUOTE_PAYLOAD
    mock_get_retry_client.assert_called_once_with(base_url="https://finnhub.test/api/v1", timeout=10.0)
    mock_client.get.assert_called_once_with("/quote", params={"symbol": "AAPL", "token": "test-key"})

@pytest.mark.asyncio
@patch('bizbank.common.services.quote_client.get_retry_client')
async def test_fetch_without_api_key(mock_get_retry_client, market_config):
    """API 키가 없으면 네트워크 호출 없이 QuoteProviderError"""
    client = FinnhubClient(market_config.model_copy(update={"finnhub_api_key": None}))

    with pytest.raises(QuoteProviderError, match="FINNHUB_API_KEY"):
        await client.get_quote("AAPL")

    mock_get_retry_client.assert_not_called()

@pytest.mark.asyncio
@patch('bizbank.common.services.quote_client.get_retry_client')
async def test_fetch_http_status_error(mock_get_retry_client, finnhub_client):
    """4xx/5xx 응답은 상태 코드를 담은 QuoteProviderError로 변환"""
    # Given
    request = httpx.Request("GET", "https://finnhub.test/api/v1/quote")
    response = httpx.Response(429, request=request)
    error = httpx.HTTPStatusError("Too Many Requests", request=request, response=response)
    _mock_http(mock_get_retry_client, raise_for_status=error)

    # When / Then
    with pytest.raises(QuoteProviderError) as exc_info:
        await finnhub_client.get_quote("AAPL")
    assert exc_info.value.status_code == 429
    assert str(exc_info.value).startswith("[429]")

@pytest.mark.asyncio
@patch('bizbank.common.services.quote_client.get_retry_client')
async def test_fetch_request_error(mock_get_retry_client, finnhub_client):
    """연결 실패는 QuoteProviderError로 변환"""
    mock_client = _mock_http(mock_get_retry_client)
    mock_client.get.side_effect = httpx.ConnectError("connection refused")

    with pytest.raises(QuoteProviderError) as exc_info:
        await finnhub_client.get_quote("AAPL")
    assert exc_info.value.status_code is None

@pytest.mark.asyncio
@patch('bizbank.common.services.quote_client.get_retry_client')
async def test_fetch_provider_error_payload(mock_get_retry_client, finnhub_client):
    """2xx 응답이라도 error 필드가 있으면 실패"""
    _mock_http(mock_get_retry_client, json_payload={"error": "You don't have access to this resource."})

    with pytest.raises(QuoteProviderError, match="access"):
        await finnhub_client.get_company_profile("EQNR.OL")

@pytest.mark.asyncio
@patch('bizbank.common.services.quote_client.get_retry_client')
async def test_get_market_news_is_truncated(mock_get_retry_client, finnhub_client):
    """뉴스는 요청한 개수만큼만 반환"""
    news = [{"id": i, "headline": f"news {i}"} for i in range(30)]
    mock_client = _mock_http(mock_get_retry_client, json_payload=news)

    result = await finnhub_client.get_market_news("general", 5)

    assert [item["id"] for item in result] == [0, 1, 2, 3, 4]
    mock_client.get.assert_called_once_with("/news", params={"category": "general", "token": "test-key"})

@pytest.mark.asyncio
@patch('bizbank.common.services.quote_client.get_retry_client')
async def test_get_company_news(mock_get_retry_client, finnhub_client):
    mock_client = _mock_http(mock_get_retry_client, json_payload=[{"headline": "Equinor results"}])

    result = await finnhub_client.get_company_news("EQNR.OL", "2024-01-08", "2024-01-15")

    assert result == [{"headline": "Equinor results"}]
    mock_client.get.assert_called_once_with(
        "/company-news",
        params={"symbol": "EQNR.OL", "from": "2024-01-08", "to": "2024-01-15", "token": "test-key"},
    )


# --- RandomWalkSparkline ---

def test_random_walk_sparkline_length_and_endpoints():
    """포인트 개수 고정, 지터 0이면 전일 종가에서 현재가까지 직선"""
    sparkline = RandomWalkSparkline(points=5, jitter=0, rng=random.Random(42))

    series = sparkline.generate(Decimal("110"), Decimal("10"))

    assert series == [100.0, 102.5, 105.0, 107.5, 110.0]

def test_random_walk_sparkline_is_seedable():
    first = RandomWalkSparkline(points=7, rng=random.Random(1)).generate(Decimal("50"), Decimal("-1"))
    second = RandomWalkSparkline(points=7, rng=random.Random(1)).generate(Decimal("50"), Decimal("-1"))

    assert len(first) == 7
    assert first == second


# --- QuoteFetcher ---

@pytest.mark.asyncio
async def test_fetch_with_profile(fetcher, mock_client):
    """프로필이 있으면 이름/통화/시가총액은 프로필 값"""
    # Given
    mock_client.get_company_profile.return_value = {
        "name": "Apple Inc", "currency": "USD", "exchange": "NASDAQ NMS - GLOBAL MARKET",
        "marketCapitalization": 2900000.5, "finnhubIndustry": "Technology",
    }

    # When
    quote = await fetcher.fetch("AAPL")

    # Then
    assert quote.symbol == "AAPL"
    assert quote.name == "Apple Inc"
    assert quote.exchange == "US"
    assert quote.price == Decimal("301.2500")
    assert quote.change == Decimal("2.5000")
    assert quote.previous_close == Decimal("298.7500")
    assert quote.currency == "USD"
    assert quote.market_cap == "2900000500000"
    assert quote.sector == "Technology"
    assert quote.sparkline_data == [1.0, 2.0, 3.0]

@pytest.mark.asyncio
async def test_fetch_profile_failure_falls_back_to_catalog(fetcher, mock_client):
    """프로필 조회 실패는 치명적이지 않음: 카탈로그 값으로 대체"""
    # Given
    mock_client.get_company_profile.side_effect = QuoteProviderError("Forbidden", status_code=403)

    # When
    quote = await fetcher.fetch("EQNR.OL")

    # Then
    assert quote.name == "Equinor ASA"
    assert quote.exchange == "OL"
    assert quote.currency == "NOK"
    assert quote.sector == "Energy"
    assert quote.market_cap is None

@pytest.mark.asyncio
async def test_fetch_unknown_symbol_without_profile(fetcher, mock_client):
    """카탈로그에도 프로필에도 없으면 심볼/USD/Unknown"""
    quote = await fetcher.fetch("ZZZZ")

    assert quote.name == "ZZZZ"
    assert quote.exchange == "US"
    assert quote.currency == "USD"
    assert quote.sector == "Unknown"

@pytest.mark.asyncio
async def test_fetch_catalog_sector_wins_over_profile_industry(fetcher, mock_client):
    mock_client.get_company_profile.return_value = {"name": "Equinor ASA", "currency": "NOK", "finnhubIndustry": "Oil & Gas"}

    quote = await fetcher.fetch("EQNR.OL")

    assert quote.sector == "Energy"

@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"c": 0, "d": None, "dp": None, "h": 0, "l": 0, "o": 0, "pc": 0, "t": 0},
    {},
])
async def test_fetch_rejects_empty_quote(fetcher, mock_client, payload):
    """Finnhub는 없는 심볼에 0으로 채운 시세를 반환함"""
    mock_client.get_quote.return_value = payload

    with pytest.raises(QuoteProviderError, match="BOGUS"):
        await fetcher.fetch("BOGUS")

@pytest.mark.asyncio
async def test_fetch_quote_error_propagates(fetcher, mock_client):
    """시세 조회 실패는 호출자에게 그대로 전달"""
    mock_client.get_quote.side_effect = QuoteProviderError("Internal Server Error", status_code=500)

    with pytest.raises(QuoteProviderError) as exc_info:
        await fetcher.fetch("AAPL")
    assert exc_info.value.status_code == 500

@pytest.mark.asyncio
@pytest.mark.parametrize("market_cap", ["N/A", "NaN", "Infinity", -5, 0])
async def test_fetch_malformed_market_cap_is_dropped(fetcher, mock_client, market_cap):
    """숫자가 아닌 시가총액은 오류 없이 None"""
    mock_client.get_company_profile.return_value = {"name": "Equinor ASA", "marketCapitalization": market_cap}

    quote = await fetcher.fetch("EQNR.OL")

    assert quote.market_cap is None
    assert quote.name == "Equinor ASA"

@pytest.mark.asyncio
async def test_fetch_quote_error_waits_for_profile_request(fetcher, mock_client):
    """시세 조회가 실패해도 진행 중인 프로필 요청은 끝까지 기다림"""
    # Given
    profile_finished = []

    async def slow_profile(symbol):
        for _ in range(3):
            await asyncio.sleep(0)
        profile_finished.append(symbol)
        return {"name": "Apple Inc"}

    mock_client.get_quote.side_effect = QuoteProviderError("Internal Server Error", status_code=500)
    mock_client.get_company_profile.side_effect = slow_profile

    # When
    with pytest.raises(QuoteProviderError):
        await fetcher.fetch("AAPL")

    # Then
    assert profile_finished == ["AAPL"]
