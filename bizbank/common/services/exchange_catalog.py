"""
거래소 카탈로그: 거래소 코드 -> 구성 종목 목록.

프로세스 시작 시 한 번 만들어지며 이후 변경되지 않습니다.
시세 갱신 대상 종목을 정하고, 제공자 프로필이 없을 때 이름/섹터/통화의 대체값을 제공합니다.
"""
from types import MappingProxyType
from typing import NamedTuple, Optional, Tuple, List


class CatalogStock(NamedTuple):
    symbol: str
    name: str
    sector: str


class Exchange(NamedTuple):
    code: str
    name: str
    country: str
    currency: str
    timezone: str
    stocks: Tuple[CatalogStock, ...]


def _exchange(code, name, country, currency, timezone, stocks):
    return Exchange(code, name, country, currency, timezone, tuple(CatalogStock(*s) for s in stocks))


EXCHANGES = MappingProxyType({
    "OL": _exchange("OL", "Oslo Børs", "Norge", "NOK", "Europe/Oslo", [
        ("EQNR.OL", "Equinor ASA", "Energy"),
        ("DNB.OL", "DNB Bank ASA", "Financial Services"),
        ("TEL.OL", "Telenor ASA", "Telecommunications"),
        ("MOWI.OL", "Mowi ASA", "Food & Beverages"),
        ("NHY.OL", "Norsk Hydro ASA", "Basic Materials"),
        ("YAR.OL", "Yara International ASA", "Basic Materials"),
        ("ORKLA.OL", "Orkla ASA", "Consumer Goods"),
        ("STL.OL", "Statoil ASA", "Energy"),
    ]),
    "US": _exchange("US", "NASDAQ / NYSE", "USA", "USD", "America/New_York", [
        ("AAPL", "Apple Inc.", "Technology"),
        ("MSFT", "Microsoft Corporation", "Technology"),
        ("GOOGL", "Alphabet Inc.", "Technology"),
        ("AMZN", "Amazon.com Inc.", "Consumer Discretionary"),
        ("TSLA", "Tesla Inc.", "Consumer Discretionary"),
        ("META", "Meta Platforms Inc.", "Technology"),
        ("JPM", "JPMorgan Chase & Co.", "Financial Services"),
        ("JNJ", "Johnson & Johnson", "Healthcare"),
    ]),
    "L": _exchange("L", "London Stock Exchange", "UK", "GBP", "Europe/London", [
        ("SHEL.L", "Shell plc", "Energy"),
        ("AZN.L", "AstraZeneca PLC", "Healthcare"),
        ("ULVR.L", "Unilever PLC", "Consumer Goods"),
        ("LSEG.L", "London Stock Exchange Group", "Financial Services"),
        ("RIO.L", "Rio Tinto Group", "Basic Materials"),
        ("BP.L", "BP p.l.c.", "Energy"),
    ]),
    "DE": _exchange("DE", "Frankfurt Stock Exchange", "Tyskland", "EUR", "Europe/Berlin", [
        ("SAP.DE", "SAP SE", "Technology"),
        ("ASME.DE", "ASML Holding N.V.", "Technology"),
        ("SIE.DE", "Siemens AG", "Industrials"),
        ("ALV.DE", "Allianz SE", "Financial Services"),
        ("DTE.DE", "Deutsche Telekom AG", "Telecommunications"),
        ("BAS.DE", "BASF SE", "Basic Materials"),
    ]),
    "HK": _exchange("HK", "Hong Kong Stock Exchange", "Hong Kong", "HKD", "Asia/Hong_Kong", [
        ("0700.HK", "Tencent Holdings Ltd.", "Technology"),
        ("9988.HK", "Alibaba Group Holding Ltd.", "Technology"),
        ("0005.HK", "HSBC Holdings plc", "Financial Services"),
        ("1299.HK", "AIA Group Ltd.", "Financial Services"),
        ("2318.HK", "Ping An Insurance", "Financial Services"),
        ("3690.HK", "Meituan", "Consumer Discretionary"),
    ]),
    "T": _exchange("T", "Tokyo Stock Exchange", "Japan", "JPY", "Asia/Tokyo", [
        ("7203.T", "Toyota Motor Corp", "Consumer Discretionary"),
        ("6758.T", "Sony Group Corp", "Technology"),
        ("9984.T", "SoftBank Group Corp", "Technology"),
        ("8306.T", "Mitsubishi UFJ Financial Group", "Financial Services"),
        ("6861.T", "Keyence Corp", "Technology"),
        ("4063.T", "Shin-Etsu Chemical Co", "Basic Materials"),
    ]),
    "ST": _exchange("ST", "Stockholm Stock Exchange", "Sverige", "SEK", "Europe/Stockholm", [
        ("VOLV-B.ST", "Volvo AB", "Industrials"),
        ("ERICB.ST", "Telefonaktiebolaget LM Ericsson", "Technology"),
        ("ATLAS-B.ST", "Atlas Copco AB", "Industrials"),
        ("HEXA-B.ST", "Hexagon AB", "Technology"),
        ("SSAB-A.ST", "SSAB AB", "Basic Materials"),
        ("SKF-B.ST", "SKF AB", "Industrials"),
    ]),
})

# 종목 -> 카탈로그 항목 역인덱스
_STOCKS_BY_SYMBOL = MappingProxyType({
    stock.symbol: stock for exchange in EXCHANGES.values() for stock in exchange.stocks
})

DEFAULT_CURRENCY = "USD"
DEFAULT_EXCHANGE_CODE = "US"


def is_supported(code: str) -> bool:
    return code in EXCHANGES


def get_exchange(code: str) -> Optional[Exchange]:
    return EXCHANGES.get(code)


def list_exchanges() -> List[Exchange]:
    return list(EXCHANGES.values())


def get_exchange_symbols(code: str) -> List[str]:
    """거래소 구성 종목 코드를 카탈로그 순서대로 반환합니다. 없는 거래소는 빈 리스트."""
    exchange = EXCHANGES.get(code)
    if exchange is None:
        return []
    return [stock.symbol for stock in exchange.stocks]


def find_catalog_stock(symbol: str) -> Optional[CatalogStock]:
    return _STOCKS_BY_SYMBOL.get(symbol)


def symbol_suffix(symbol: str) -> Optional[str]:
    """'EQNR.OL' -> 'OL', 'AAPL' -> None"""
    if "." not in symbol:
        return None
    suffix = symbol.rsplit(".", 1)[1]
    return suffix.upper() or None


def exchange_code_for_symbol(symbol: str) -> str:
    suffix = symbol_suffix(symbol)
    return suffix if suffix in EXCHANGES else DEFAULT_EXCHANGE_CODE


def default_currency_for_symbol(symbol: str) -> str:
    """종목 접미사로 기본 통화를 추정합니다. (.OL -> NOK, 알 수 없으면 USD)"""
    exchange = EXCHANGES.get(symbol_suffix(symbol) or "")
    return exchange.currency if exchange else DEFAULT_CURRENCY
