import pytest

from api.dependencies import cleanup_dependencies, deps, get_converter_form, init_dependencies
from infrastructure.cache.file_cache import FileKeyValueStore


@pytest.mark.asyncio
async def test_init_dependencies_wires_form_to_refresher():
    init_dependencies()
    try:
        assert isinstance(deps.store, FileKeyValueStore)
        assert get_converter_form() is deps.form
        assert deps.refresher.listeners == [deps.form.on_rate_event]
        assert deps.form.conversion_service.aggregator is deps.aggregator
    finally:
        await cleanup_dependencies()
        deps.store = deps.fetcher = deps.aggregator = deps.refresher = deps.form = None
