class QuoteProviderError(Exception):
    """시세 제공자(Finnhub) API와 통신 중 발생하는 오류"""
    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(f"[{status_code}] {message}" if status_code else message)

class UnsupportedExchangeError(Exception):
    """거래소 카탈로그에 없는 거래소 코드가 요청되었을 때 발생하는 오류"""
    def __init__(self, exchange: str):
        self.exchange = exchange
        super().__init__(f"Unsupported exchange: {exchange}")
