import logging
from datetime import timedelta
from typing import Annotated

from fastapi import Depends
from redis.asyncio import Redis

from application.services import ConversionService, ConverterForm, RateAggregator, RateRefresher
from config.settings import Settings, get_settings
from infrastructure.cache.file_cache import FileKeyValueStore
from infrastructure.cache.redis_cache import RedisKeyValueStore
from infrastructure.cache.snapshot_cache import KeyValueStore, SnapshotCache
from infrastructure.providers import DEFAULT_SOURCES, SourceFetcher

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	store: KeyValueStore | None = None
	fetcher: SourceFetcher | None = None
	aggregator: RateAggregator | None = None
	refresher: RateRefresher | None = None
	form: ConverterForm | None = None


deps = AppDependencies()


def build_store(settings: Settings) -> KeyValueStore:
	if settings.CACHE_BACKEND == 'redis':
		return RedisKeyValueStore(Redis.from_url(settings.REDIS_URL, decode_responses=True))
	return FileKeyValueStore(settings.CACHE_FILE)


def init_dependencies() -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	deps.store = build_store(settings)
	deps.fetcher = SourceFetcher(timeout=settings.SOURCE_TIMEOUT_SECONDS)
	cache = SnapshotCache(deps.store, key=settings.CACHE_KEY, ttl=timedelta(days=settings.CACHE_TTL_DAYS))
	deps.aggregator = RateAggregator(sources=DEFAULT_SOURCES, fetcher=deps.fetcher, cache=cache)
	deps.refresher = RateRefresher(deps.aggregator)
	deps.form = ConverterForm(ConversionService(deps.aggregator))
	deps.refresher.add_listener(deps.form.on_rate_event)
	logger.info(f'Dependencies initialized ({settings.CACHE_BACKEND} cache, {len(DEFAULT_SOURCES)} sources)')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.refresher:
		await deps.refresher.close()
	if deps.fetcher:
		await deps.fetcher.close()
	if deps.store:
		await deps.store.close()

	logger.info('Cleanup complete')


async def bootstrap() -> None:
	"""Load cached or live rates. Called after init_dependencies() at startup."""
	logger.info('Bootstrapping application...')

	if deps.refresher is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')

	result = await deps.refresher.start()
	if result is None:
		logger.error('Starting without exchange rates; conversions are unavailable until a refresh succeeds')

	logger.info('Bootstrap complete')


def get_rate_aggregator() -> RateAggregator:
	if deps.aggregator is None:
		raise RuntimeError('Rate aggregator not initialized')
	return deps.aggregator


def get_rate_refresher() -> RateRefresher:
	if deps.refresher is None:
		raise RuntimeError('Rate refresher not initialized')
	return deps.refresher


def get_conversion_service(
	aggregator: Annotated[RateAggregator, Depends(get_rate_aggregator)],
) -> ConversionService:
	return ConversionService(aggregator=aggregator)


def get_converter_form() -> ConverterForm:
	if deps.form is None:
		raise RuntimeError('Converter form not initialized')
	return deps.form
