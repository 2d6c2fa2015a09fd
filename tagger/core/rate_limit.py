"""
Rate limiter: фиксированное окно на клиента (IP) поверх библиотеки limits.

Алгоритм (limits.strategies.FixedWindowRateLimiter + MemoryStorage):
    - первый запрос клиента открывает окно длиной window секунд
    - каждый следующий запрос увеличивает счётчик окна
    - если счётчик > limit - запрос отклоняется
    - после конца окна ключ истекает, следующий запрос открывает новое

Это fixed window, а не sliding window: на стыке двух окон клиент может
успеть сделать до 2 * limit запросов подряд.

Жизненный цикл:
    limiter = RateLimiter(limit=100, window=60)
    limiter.start()        # в lifespan приложения, запускает фоновую очистку
    limiter.hit("1.2.3.4") # в middleware на каждый запрос
    await limiter.stop()   # при остановке приложения
"""

import asyncio
import contextlib
import time

from limits import RateLimitItemPerSecond, WindowStats
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from .exceptions import RateLimitExceeded
from .logging import get_logger

logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later"


class RateLimiter:
    """
    Лимит запросов на клиента с фиксированным окном.

    Счётчики и их истечение хранит limits.MemoryStorage; этот класс
    добавляет доменную ошибку и периодическую очистку в event loop.
    """

    def __init__(
        self,
        limit: int = 100,
        window: int = 60,
        sweep_interval: float = 300.0,
        storage: MemoryStorage | None = None,
    ):
        """
        Args:
            limit: Максимум запросов за окно
            window: Длина окна в секундах
            sweep_interval: Период фоновой очистки истёкших записей (секунды)
            storage: Хранилище счётчиков (по умолчанию своё MemoryStorage)
        """
        self.limit = limit
        self.window = window
        self.sweep_interval = sweep_interval
        self.item = RateLimitItemPerSecond(limit, window)
        self.storage = storage or MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self.storage)
        self._sweeper: asyncio.Task | None = None

    def hit(self, key: str) -> WindowStats:
        """
        Учесть запрос клиента.

        Returns:
            WindowStats(reset_time, remaining) для текущего окна клиента

        Raises:
            RateLimitExceeded: Если лимит окна превышен
        """
        if not self._strategy.hit(self.item, key):
            logger.warning("Rate limit exceeded", extra={"client": key, "limit": self.limit})
            raise RateLimitExceeded(RATE_LIMIT_MESSAGE)

        return self._strategy.get_window_stats(self.item, key)

    def sweep(self) -> int:
        """
        Удалить счётчики, у которых окно уже закончилось.

        Returns:
            Количество удалённых записей
        """
        now = time.time()
        expired = [key for key, expiry in list(self.storage.expirations.items()) if expiry <= now]
        for key in expired:
            self.storage.clear(key)

        if expired:
            logger.debug("Rate limiter sweep", extra={"removed": len(expired)})
        return len(expired)

    def reset(self) -> None:
        """Забыть всех клиентов."""
        self.storage.reset()

    def __len__(self) -> int:
        return len(self.storage.expirations)

    # Фоновая очистка

    def start(self) -> None:
        """Запустить фоновую очистку в текущем event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop(self) -> None:
        """Остановить фоновую очистку."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()
