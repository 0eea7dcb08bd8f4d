import json
import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Protocol

from domain.exceptions.currency import CacheReadError
from domain.models.currency import AggregationResult, Currency, RateTable

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = 'exchangeRates'
SNAPSHOT_TTL = timedelta(days=7)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: timedelta) -> None: ...

    async def close(self) -> None: ...


class SnapshotCache:
    """Stores the latest aggregation result as one JSON document with a TTL."""

    def __init__(self, store: KeyValueStore, key: str = SNAPSHOT_KEY, ttl: timedelta = SNAPSHOT_TTL):
        self.store = store
        self.key = key
        self.ttl = ttl

    async def save(self, result: AggregationResult) -> None:
        snapshot = {
            'rates': {code: str(rate) for code, rate in result.rates.as_dict().items()},
            'lastUpdate': result.timestamp.isoformat(),
            'sourcesUsed': result.sources_used,
            'totalSources': result.total_sources,
        }
        await self.store.set(self.key, json.dumps(snapshot), self.ttl)
        logger.debug(f'Snapshot written to {self.key} (ttl {self.ttl})')

    async def load(self) -> AggregationResult | None:
        data = await self.store.get(self.key)
        if not data:
            return None
        return self.decode(data)

    @staticmethod
    def decode(data: str) -> AggregationResult:
        try:
            snapshot = json.loads(data)
        except json.JSONDecodeError as e:
            raise CacheReadError('Invalid json data in rate snapshot') from e
        if not isinstance(snapshot, dict):
            raise CacheReadError('Rate snapshot is not a JSON object')

        try:
            raw_rates = snapshot['rates']
            rates = {
                Currency(code): Decimal(str(value))
                for code, value in raw_rates.items()
                if code in Currency._value2member_map_
            }
            table = RateTable(rates)
            timestamp = datetime.fromisoformat(snapshot['lastUpdate'])
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=UTC)
            sources_used = int(snapshot['sourcesUsed'])
            total_sources = int(snapshot['totalSources'])
        except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
            raise CacheReadError(f'Malformed rate snapshot: {e}') from e

        return AggregationResult(
            rates=table,
            timestamp=timestamp,
            sources_used=sources_used,
            total_sources=total_sources,
            from_cache=True,
        )
