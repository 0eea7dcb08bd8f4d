import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from domain.exceptions.currency import SourceFetchError
from domain.models.currency import BASE_CURRENCY, QUOTE_CURRENCIES, Currency, PartialRates, is_valid_rate

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

RateMapper = Callable[[dict[str, Any]], PartialRates]


@dataclass(frozen=True)
class RateSource:
    """A public rate provider: where to fetch and how to read the payload."""
    name: str
    url: str
    supported: frozenset[Currency]
    mapper: RateMapper

    def map_response(self, data: dict[str, Any]) -> PartialRates:
        rates = self.mapper(data)
        # Capability flags win over whatever the payload happens to carry.
        for currency in QUOTE_CURRENCIES:
            if currency not in self.supported:
                rates[currency] = None
        rates[BASE_CURRENCY] = Decimal(1)
        return rates


def to_rate(value: Any) -> Decimal | None:
    """Parse one rate from a JSON payload. Missing values are absent, garbage is an error."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f'Invalid rate value: {value!r}')
    try:
        rate = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f'Invalid rate value: {value!r}') from e
    if not is_valid_rate(rate):
        raise ValueError(f'Invalid rate value: {value!r}')
    return rate


def map_rates_object(data: dict[str, Any], supported: frozenset[Currency]) -> PartialRates:
    """Read `{"rates": {CODE: value}}`, the shape shared by all registered providers."""
    rates = data['rates']
    if not isinstance(rates, dict):
        raise ValueError('"rates" is not an object')
    return {currency: to_rate(rates.get(currency.value)) for currency in supported}


class SourceFetcher:
    """Performs one bounded GET per source and maps the payload.

    Failures never escape `fetch`: they are logged and reported as None.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={'accept': 'application/json'},
            follow_redirects=True,
        )

    async def _request(self, source: RateSource) -> dict[str, Any]:
        try:
            response = await asyncio.wait_for(self._client.get(source.url), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(
                f'{source.name} HTTP error {e.response.status_code}: {e.response.text[:200]}'
            ) from e
        except TimeoutError as e:
            raise SourceFetchError(f'{source.name} timed out after {self.timeout}s') from e
        except httpx.RequestError as e:
            raise SourceFetchError(f'{source.name} request failed: {e.__class__.__name__}') from e
        except ValueError as e:
            raise SourceFetchError(f'{source.name} response parsing error: {str(e)}') from e

        if not isinstance(data, dict):
            raise SourceFetchError(f'{source.name} response parsing error: expected a JSON object')
        return data

    async def fetch_rates(self, source: RateSource) -> PartialRates:
        data = await self._request(source)
        try:
            return source.map_response(data)
        except (KeyError, TypeError, ValueError) as e:
            raise SourceFetchError(f'{source.name} mapping error: {e.__class__.__name__}: {e}') from e

    async def fetch(self, source: RateSource) -> PartialRates | None:
        try:
            rates = await self.fetch_rates(source)
        except SourceFetchError as e:
            logger.warning(f'Source {source.name} failed: {e}')
            return None

        reported = {c.value: str(r) for c, r in rates.items() if r is not None and c is not BASE_CURRENCY}
        logger.info(f'Source {source.name} returned {reported}')
        return rates

    async def close(self) -> None:
        await self._client.aclose()
