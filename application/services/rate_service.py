import asyncio
import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from decimal import MAX_EMAX, MIN_EMIN, Decimal, localcontext

from domain.exceptions.currency import (
    AllSourcesFailedError,
    CacheError,
    InvalidCurrencyError,
    MissingCurrencyRateError,
    RatesNotLoadedError,
)
from domain.models.currency import (
    BASE_CURRENCY,
    QUOTE_CURRENCIES,
    AggregationResult,
    Currency,
    PartialRates,
    RateTable,
)
from infrastructure.cache.snapshot_cache import SnapshotCache
from infrastructure.providers.base import RateSource, SourceFetcher

logger = logging.getLogger(__name__)


def parse_currency(code: Currency | str) -> Currency:
    if isinstance(code, Currency):
        return code
    try:
        return Currency(str(code).strip().upper())
    except ValueError as e:
        raise InvalidCurrencyError(f'Currency {code} is not supported') from e


def average_rates(results: Iterable[PartialRates]) -> RateTable:
    """Per-currency arithmetic mean over the sources that reported the currency.

    All-or-nothing: one currency without any value fails the whole table.
    """
    results = list(results)
    rates: dict[Currency, Decimal] = {BASE_CURRENCY: Decimal(1)}

    for currency in QUOTE_CURRENCIES:
        values = [r[currency] for r in results if r.get(currency) is not None]
        if not values:
            raise MissingCurrencyRateError(currency.value)
        rates[currency] = sum(values, Decimal(0)) / len(values)

    return RateTable(rates)


class RateAggregator:
    def __init__(
        self,
        sources: Sequence[RateSource],
        fetcher: SourceFetcher,
        cache: SnapshotCache,
    ):
        self.sources = tuple(sources)
        self.fetcher = fetcher
        self.cache = cache
        self._active: AggregationResult | None = None

    @property
    def active(self) -> AggregationResult | None:
        return self._active

    def set_active(self, result: AggregationResult) -> None:
        # Single assignment: readers see either the old snapshot or the new one.
        self._active = result

    async def fetch_rates(self) -> AggregationResult:
        logger.info(f'Fetching exchange rates from {len(self.sources)} sources...')

        results = await asyncio.gather(
            *(self.fetcher.fetch(source) for source in self.sources),
            return_exceptions=True,
        )

        successful: list[tuple[str, PartialRates]] = []
        for source, result in zip(self.sources, results, strict=True):
            if isinstance(result, Exception):
                logger.error(f'Unexpected failure fetching from {source.name}: {result!r}')
            elif result is not None:
                successful.append((source.name, result))

        if not successful:
            raise AllSourcesFailedError(len(self.sources))

        table = average_rates(rates for _, rates in successful)
        result = AggregationResult(
            rates=table,
            timestamp=datetime.now(UTC),
            sources_used=len(successful),
            total_sources=len(self.sources),
            sources=tuple(name for name, _ in successful),
        )
        self.set_active(result)

        averaged = {code: str(rate) for code, rate in table.as_dict().items()}
        logger.info(f'Averaged rates: {averaged}')
        logger.info(f'Sources used: {result.sources_used}/{result.total_sources}')

        try:
            await self.cache.save(result)
        except CacheError as e:
            logger.warning(f'Failed to cache exchange rates: {e}')

        return result

    async def load_from_cache(self) -> AggregationResult | None:
        try:
            result = await self.cache.load()
        except CacheError as e:
            logger.warning(f'Ignoring cached exchange rates: {e}')
            return None

        if result is None:
            logger.info('No cached exchange rates')
            return None

        if self._active is None:
            self.set_active(result)
        logger.info(f'Loaded cached exchange rates from {result.timestamp.isoformat()}')
        return result

    def convert(self, amount: Decimal, from_currency: Currency | str, to_currency: Currency | str) -> Decimal:
        active = self._active
        if active is None:
            raise RatesNotLoadedError()

        source = parse_currency(from_currency)
        target = parse_currency(to_currency)
        if source is target:
            return amount

        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        # Amounts are unbounded: no overflow below the widest exponent range.
        with localcontext() as ctx:
            ctx.Emax, ctx.Emin = MAX_EMAX, MIN_EMIN
            amount_in_base = amount / active.rates[source]
            return amount_in_base * active.rates[target]
