# nosec B101


from decimal import Decimal

import pytest

from domain.models.currency import BASE_CURRENCY, QUOTE_CURRENCIES, Currency, RateTable

COMPLETE = {
    Currency.USD: Decimal('1'),
    Currency.ARS: Decimal('1010'),
    Currency.AED: Decimal('3.67'),
    Currency.CNY: Decimal('7.1'),
    Currency.CAD: Decimal('1.36'),
    Currency.PEN: Decimal('3.75'),
    Currency.BRL: Decimal('5.4'),
}


def test_base_currency_is_usd_and_not_a_quote():
    assert BASE_CURRENCY is Currency.USD
    assert BASE_CURRENCY not in QUOTE_CURRENCIES
    assert len(QUOTE_CURRENCIES) == len(Currency) - 1


def test_display_precision_and_names():
    assert Currency.ARS.display_precision == 2
    assert Currency.AED.display_precision == 4
    assert Currency.ARS.display_name == 'Argentine Peso'


def test_complete_table_builds():
    table = RateTable(COMPLETE)

    assert table[Currency.ARS] == Decimal('1010')
    assert table.as_dict()['USD'] == Decimal('1')


def test_table_is_read_only():
    source = dict(COMPLETE)
    table = RateTable(source)
    source[Currency.ARS] = Decimal('1')

    assert table[Currency.ARS] == Decimal('1010')
    with pytest.raises(TypeError):
        table.rates[Currency.ARS] = Decimal('5')


def test_incomplete_table_is_rejected():
    rates = dict(COMPLETE)
    del rates[Currency.PEN]

    with pytest.raises(ValueError) as exc_info:
        RateTable(rates)

    assert 'PEN' in str(exc_info.value)


def test_base_must_be_one():
    with pytest.raises(ValueError):
        RateTable({**COMPLETE, Currency.USD: Decimal('2')})


@pytest.mark.parametrize('bad', [Decimal('0'), Decimal('-1'), Decimal('NaN'), Decimal('Infinity')])
def test_non_positive_or_non_finite_rates_are_rejected(bad):
    with pytest.raises(ValueError):
        RateTable({**COMPLETE, Currency.CNY: bad})
