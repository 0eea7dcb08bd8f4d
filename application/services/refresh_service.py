import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from application.services.rate_service import RateAggregator
from domain.exceptions.currency import RateAggregationError
from domain.models.currency import AggregationResult

logger = logging.getLogger(__name__)


class RateEvent(Enum):
    RATES_LOADED = 'rates_loaded'
    RATES_ERROR = 'rates_error'
    BACKGROUND_REFRESHED = 'background_refreshed'


RateListener = Callable[[RateEvent, Any], None]


class RateRefresher:
    """Startup and refresh policy around a RateAggregator.

    With a usable cache the cached rates are published immediately and a live
    fetch runs in the background; its failure leaves the cached rates active.
    Without a cache the live fetch runs in the foreground.
    """

    def __init__(self, aggregator: RateAggregator):
        self.aggregator = aggregator
        self.listeners: list[RateListener] = []
        self.background_task: asyncio.Task | None = None
        self.last_error: RateAggregationError | None = None

    def add_listener(self, listener: RateListener) -> None:
        self.listeners.append(listener)

    def _emit(self, event: RateEvent, payload: Any) -> None:
        for listener in self.listeners:
            try:
                listener(event, payload)
            except Exception:
                logger.exception(f'Listener {listener!r} failed on {event.value}')

    async def start(self) -> AggregationResult | None:
        cached = await self.aggregator.load_from_cache()
        if cached is not None:
            self._emit(RateEvent.RATES_LOADED, cached)
            self.background_task = asyncio.create_task(self._background_refresh())
            return cached

        return await self.refresh()

    async def refresh(self) -> AggregationResult | None:
        try:
            result = await self.aggregator.fetch_rates()
        except RateAggregationError as e:
            logger.error(f'Failed to load exchange rates: {e}')
            self.last_error = e
            self._emit(RateEvent.RATES_ERROR, e)
            return None

        self.last_error = None
        self._emit(RateEvent.RATES_LOADED, result)
        return result

    async def _background_refresh(self) -> AggregationResult | None:
        try:
            result = await self.aggregator.fetch_rates()
        except RateAggregationError as e:
            logger.warning(f'Background refresh failed, keeping cached rates: {e}')
            return None

        logger.info('Exchange rates updated in background')
        self._emit(RateEvent.BACKGROUND_REFRESHED, result)
        return result

    async def wait_for_background(self) -> AggregationResult | None:
        if self.background_task is None:
            return None
        return await self.background_task

    async def close(self) -> None:
        task, self.background_task = self.background_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
