from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_converter_form, get_rate_aggregator, get_rate_refresher
from api.main import app
from application.services import ConversionService, ConverterForm, RateAggregator, RateRefresher
from domain.exceptions.currency import AllSourcesFailedError
from domain.models.currency import AggregationResult, Currency, RateTable
from infrastructure.providers.base import SourceFetcher


def make_result(from_cache: bool = False) -> AggregationResult:
    return AggregationResult(
        rates=RateTable({
            Currency.USD: Decimal('1'),
            Currency.ARS: Decimal('1010'),
            Currency.AED: Decimal('3.67'),
            Currency.CNY: Decimal('7.1'),
            Currency.CAD: Decimal('1.36'),
            Currency.PEN: Decimal('3.75'),
            Currency.BRL: Decimal('5.4'),
        }),
        timestamp=datetime.now(UTC),
        sources_used=2,
        total_sources=3,
        from_cache=from_cache,
    )


@pytest.fixture
def aggregator():
    return RateAggregator(sources=[], fetcher=AsyncMock(spec=SourceFetcher), cache=AsyncMock())


@pytest.fixture
def refresher(aggregator):
    return RateRefresher(aggregator)


@pytest.fixture
def form(aggregator, refresher):
    form = ConverterForm(ConversionService(aggregator))
    refresher.add_listener(form.on_rate_event)
    return form


@pytest.fixture
def client(aggregator, refresher, form):
    # No lifespan: the real startup would hit the network.
    app.dependency_overrides[get_rate_aggregator] = lambda: aggregator
    app.dependency_overrides[get_rate_refresher] = lambda: refresher
    app.dependency_overrides[get_converter_form] = lambda: form
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_supported_currencies(client):
    response = client.get('/api/currencies')

    assert response.status_code == 200
    assert response.json()['currencies'] == ['USD', 'ARS', 'AED', 'CNY', 'CAD', 'PEN', 'BRL']


def test_rates_not_loaded_returns_503(client):
    response = client.get('/api/rates')

    assert response.status_code == 503
    assert response.json()['detail'] == 'Exchange rates not loaded'


def test_get_rates(client, aggregator):
    aggregator.set_active(make_result(from_cache=True))

    response = client.get('/api/rates')

    assert response.status_code == 200
    data = response.json()
    assert data['base_currency'] == 'USD'
    assert Decimal(data['rates']['ARS']) == Decimal('1010')
    assert data['sources_used'] == 2
    assert data['total_sources'] == 3
    assert data['from_cache'] is True
    assert data['last_update_ago'] == 'just now'
    assert data['summary'][-1] == 'Data averaged from 2/3 sources'


def test_convert_currency(client, aggregator):
    aggregator.set_active(make_result())

    response = client.get('/api/convert/usd/ars/100')

    assert response.status_code == 200
    data = response.json()
    assert data['from_currency'] == 'USD'
    assert data['to_currency'] == 'ARS'
    assert Decimal(data['converted_amount']) == Decimal('101000')
    assert Decimal(data['exchange_rate']) == Decimal('1010')


def test_convert_same_currency_is_identity(client, aggregator):
    aggregator.set_active(make_result())

    response = client.get('/api/convert/CNY/CNY/42.5')

    assert Decimal(response.json()['converted_amount']) == Decimal('42.5')


def test_convert_unknown_currency_returns_400(client, aggregator):
    aggregator.set_active(make_result())

    response = client.get('/api/convert/USD/EUR/100')

    assert response.status_code == 400
    assert 'EUR' in response.json()['detail']


def test_convert_negative_amount_rejected(client, aggregator):
    aggregator.set_active(make_result())

    response = client.get('/api/convert/USD/ARS/-1')

    assert response.status_code == 422


def test_convert_before_rates_loaded_returns_503(client):
    response = client.get('/api/convert/USD/ARS/100')

    assert response.status_code == 503


def test_convert_fields(client, aggregator):
    aggregator.set_active(make_result())

    response = client.post('/api/convert', json={'currency': 'usd', 'amount': '100'})

    assert response.status_code == 200
    data = response.json()
    assert data['currency'] == 'USD'
    assert data['fields']['ARS'] == '101000.00'
    assert data['fields']['AED'] == '367.00'
    assert 'USD' not in data['fields']


def test_convert_fields_invalid_amount_clears(client, aggregator):
    aggregator.set_active(make_result())

    response = client.post('/api/convert', json={'currency': 'ARS', 'amount': 'abc'})

    assert response.status_code == 200
    assert set(response.json()['fields'].values()) == {''}


def test_refresh_rates(client, aggregator):
    aggregator.fetch_rates = AsyncMock(return_value=make_result())

    response = client.post('/api/rates/refresh')

    assert response.status_code == 200
    assert response.json()['from_cache'] is False
    aggregator.fetch_rates.assert_awaited_once()


def test_refresh_rates_all_sources_failed_returns_503(client, aggregator):
    aggregator.fetch_rates = AsyncMock(side_effect=AllSourcesFailedError(3))

    response = client.post('/api/rates/refresh')

    assert response.status_code == 503
    assert 'All 3 exchange rate sources failed' in response.json()['detail']


def test_refresh_rates_clears_last_error_and_updates_form(client, aggregator, refresher, form):
    refresher.last_error = AllSourcesFailedError(3)
    async def fetch_rates():
        aggregator.set_active(make_result())
        return aggregator.active

    aggregator.fetch_rates = AsyncMock(side_effect=fetch_rates)

    response = client.post('/api/rates/refresh')

    assert response.status_code == 200
    assert refresher.last_error is None
    assert form.fields[Currency.USD] == '100'
    assert form.fields[Currency.ARS] == '101000.00'


def test_refresh_failure_is_recorded(client, aggregator, refresher):
    aggregator.fetch_rates = AsyncMock(side_effect=AllSourcesFailedError(3))

    client.post('/api/rates/refresh')

    assert isinstance(refresher.last_error, AllSourcesFailedError)


def test_get_form_before_any_input(client):
    response = client.get('/api/form')

    assert response.status_code == 200
    assert response.json() == {'last_input': None, 'fields': {c.value: '' for c in Currency}}


def test_edit_form(client, aggregator):
    aggregator.set_active(make_result())

    response = client.post('/api/form', json={'currency': 'ars', 'amount': '2020'})

    assert response.status_code == 200
    data = response.json()
    assert data['last_input'] == 'ARS'
    assert data['fields']['ARS'] == '2020'
    assert data['fields']['USD'] == '2.00'
    assert client.get('/api/form').json() == data


def test_edit_form_before_rates_loaded_returns_503(client):
    response = client.post('/api/form', json={'currency': 'USD', 'amount': '5'})

    assert response.status_code == 503


def test_convert_huge_amount(client, aggregator):
    aggregator.set_active(make_result())

    response = client.get('/api/convert/USD/ARS/1e999999')

    assert response.status_code == 200
    assert Decimal(response.json()['converted_amount']) == Decimal('1.01e1000002')
