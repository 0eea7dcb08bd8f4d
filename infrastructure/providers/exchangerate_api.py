from typing import Any

from domain.models.currency import Currency, PartialRates
from infrastructure.providers.base import RateSource, map_rates_object

SUPPORTED = frozenset(
    {Currency.ARS, Currency.AED, Currency.CNY, Currency.CAD, Currency.PEN, Currency.BRL}
)


def map_exchangerate_api(data: dict[str, Any]) -> PartialRates:
    return map_rates_object(data, SUPPORTED)


EXCHANGERATE_API = RateSource(
    name='ExchangeRate-API',
    url='https://api.exchangerate-api.com/v4/latest/USD',
    supported=SUPPORTED,
    mapper=map_exchangerate_api,
)
