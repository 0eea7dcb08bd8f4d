from typing import Any

from domain.models.currency import Currency, PartialRates
from infrastructure.providers.base import RateSource, map_rates_object

SUPPORTED = frozenset(
    {Currency.ARS, Currency.AED, Currency.CNY, Currency.CAD, Currency.PEN, Currency.BRL}
)


def map_open_er_api(data: dict[str, Any]) -> PartialRates:
    if data.get('result') != 'success':
        raise ValueError(f'Open Exchange Rates error: {data.get("error-type", "unknown error")}')
    return map_rates_object(data, SUPPORTED)


OPEN_ER_API = RateSource(
    name='Open Exchange Rates',
    url='https://open.er-api.com/v6/latest/USD',
    supported=SUPPORTED,
    mapper=map_open_er_api,
)
