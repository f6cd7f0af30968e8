import pytest

from bizbank.common.services import exchange_catalog


def test_list_exchanges_contains_all_supported_codes():
    """카탈로그는 7개 거래소를 정의된 순서로 제공"""
    codes = [exchange.code for exchange in exchange_catalog.list_exchanges()]
    assert codes == ["OL", "US", "L", "DE", "HK", "T", "ST"]

def test_oslo_exchange_members_and_currency():
    """오슬로 거래소 구성 종목과 통화"""
    oslo = exchange_catalog.get_exchange("OL")

    assert oslo.currency == "NOK"
    assert oslo.timezone == "Europe/Oslo"
    assert exchange_catalog.get_exchange_symbols("OL")[:3] == ["EQNR.OL", "DNB.OL", "TEL.OL"]

def test_unknown_exchange():
    """카탈로그에 없는 거래소: 지원 안 함, 구성 종목 없음"""
    assert exchange_catalog.is_supported("XX") is False
    assert exchange_catalog.get_exchange("XX") is None
    assert exchange_catalog.get_exchange_symbols("XX") == []

def test_catalog_is_read_only():
    """카탈로그는 실행 중 변경 불가"""
    with pytest.raises(TypeError):
        exchange_catalog.EXCHANGES["XX"] = exchange_catalog.EXCHANGES["OL"]

@pytest.mark.parametrize("symbol, expected", [
    ("EQNR.OL", "OL"),
    ("SHEL.L", "L"),
    ("VOLV-B.ST", "ST"),
    ("AAPL", "US"),
    ("FOO.XX", "US"),
])
def test_exchange_code_for_symbol(symbol, expected):
    assert exchange_catalog.exchange_code_for_symbol(symbol) == expected

@pytest.mark.parametrize("symbol, expected", [
    ("DNB.OL", "NOK"),
    ("7203.T", "JPY"),
    ("SAP.DE", "EUR"),
    ("AAPL", "USD"),
    ("FOO.XX", "USD"),
])
def test_default_currency_for_symbol(symbol, expected):
    assert exchange_catalog.default_currency_for_symbol(symbol) == expected

def test_find_catalog_stock():
    """카탈로그 종목 조회 (이름/섹터 대체값 용도)"""
    stock = exchange_catalog.find_catalog_stock("EQNR.OL")

    assert stock.name == "Equinor ASA"
    assert stock.sector == "Energy"
    assert exchange_catalog.find_catalog_stock("UNKNOWN") is None
