from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType


class Currency(str, Enum):
    USD = 'USD'
    ARS = 'ARS'
    AED = 'AED'
    CNY = 'CNY'
    CAD = 'CAD'
    PEN = 'PEN'
    BRL = 'BRL'

    @property
    def display_name(self) -> str:
        return CURRENCY_NAMES[self]

    @property
    def display_precision(self) -> int:
        """Decimal places used when showing a rate for this currency."""
        return 2 if self is Currency.ARS else 4


BASE_CURRENCY = Currency.USD

CURRENCY_NAMES = {
    Currency.USD: 'US Dollar',
    Currency.ARS: 'Argentine Peso',
    Currency.AED: 'UAE Dirham',
    Currency.CNY: 'Chinese Yuan',
    Currency.CAD: 'Canadian Dollar',
    Currency.PEN: 'Peruvian Sol',
    Currency.BRL: 'Brazilian Real',
}

QUOTE_CURRENCIES = tuple(c for c in Currency if c is not BASE_CURRENCY)

# What a single source reports. None marks a currency the source does not supply.
PartialRates = dict[Currency, Decimal | None]


def is_valid_rate(value: Decimal) -> bool:
    return value.is_finite() and value > 0


@dataclass(frozen=True)
class RateTable:
    """Units of each currency per one unit of the base currency.

    Only complete tables can be built: every enumerated currency must have a
    positive finite rate and the base must be exactly 1.
    """
    rates: Mapping[Currency, Decimal]

    def __post_init__(self):
        missing = [c.value for c in Currency if c not in self.rates]
        if missing:
            raise ValueError(f'Rate table is missing {", ".join(missing)}')
        if self.rates[BASE_CURRENCY] != 1:
            raise ValueError(f'Base currency {BASE_CURRENCY.value} must have rate 1')
        for currency, rate in self.rates.items():
            if not is_valid_rate(rate):
                raise ValueError(f'Invalid rate for {currency.value}: {rate}')
        object.__setattr__(self, 'rates', MappingProxyType(dict(self.rates)))

    def __getitem__(self, currency: Currency) -> Decimal:
        return self.rates[currency]

    def as_dict(self) -> dict[str, Decimal]:
        return {currency.value: rate for currency, rate in self.rates.items()}


@dataclass(frozen=True)
class AggregationResult:
    rates: RateTable
    timestamp: datetime
    sources_used: int
    total_sources: int
    sources: tuple[str, ...] = field(default=())
    from_cache: bool = False
