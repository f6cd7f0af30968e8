import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class RequestThrottle:
    """
    연속된 업스트림 호출 사이에 최소 간격을 보장합니다.

    배치 하나당 인스턴스 하나를 사용합니다. 첫 호출은 바로 통과하고,
    이후 호출은 직전 호출로부터 min_interval 초가 지날 때까지 대기합니다.
    따라서 N번 호출은 최소 (N-1) * min_interval 초가 걸립니다.
    """

    def __init__(self, min_interval: float, clock=time.monotonic, sleep=asyncio.sleep):
        self.min_interval = max(min_interval, 0.0)
        self._clock = clock
        self._sleep = sleep
        self._last_call = None

    async def wait(self):
        if self._last_call is not None:
            remaining = self.min_interval - (self._clock() - self._last_call)
            if remaining > 0:
                logger.debug(f"업스트림 호출 간격 유지를 위해 {remaining:.3f}초 대기.")
                await self._sleep(remaining)
        self._last_call = self._clock()
