import httpx
from httpx import AsyncClient

def get_retry_client(base_url: str = "", timeout: float = 10.0) -> AsyncClient:
    """
    재시도 로직이 포함된 AsyncClient 인스턴스를 반환합니다.
    연결 오류 발생 시 트랜스포트 수준에서 최대 3번 재시도합니다.
    응답을 받은 요청(4xx/5xx 포함)은 재시도하지 않습니다.
    """
    transport = httpx.AsyncHTTPTransport(retries=3)
    return AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
