from typing import Any

from domain.models.currency import BASE_CURRENCY, Currency, PartialRates
from infrastructure.providers.base import RateSource, map_rates_object

# ECB reference rates: no ARS, AED or PEN.
SUPPORTED = frozenset({Currency.CNY, Currency.CAD, Currency.BRL})


def map_frankfurter(data: dict[str, Any]) -> PartialRates:
    base = data.get('base')
    if base is not None and base != BASE_CURRENCY.value:
        raise ValueError(f'Frankfurter returned rates for base {base}')
    return map_rates_object(data, SUPPORTED)


FRANKFURTER = RateSource(
    name='Frankfurter',
    url='https://api.frankfurter.app/latest?from=USD&to=' + ','.join(sorted(c.value for c in SUPPORTED)),
    supported=SUPPORTED,
    mapper=map_frankfurter,
)
