from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from application.services.rate_service import RateAggregator, parse_currency
from application.services.refresh_service import RateEvent
from domain.models.currency import BASE_CURRENCY, QUOTE_CURRENCIES, AggregationResult, Currency

TWO_PLACES = Decimal('0.01')
# Amounts from 10**21 up are shown in exponent notation.
FIXED_NOTATION_LIMIT = 21


def parse_amount(raw: str | Decimal | float | None) -> Decimal | None:
	"""Parse user input. Empty, unparseable, non-finite or negative input yields None."""
	if raw is None:
		return None
	try:
		value = Decimal(str(raw).strip())
	except InvalidOperation:
		return None
	if not value.is_finite() or value < 0:
		return None
	# "-0" passes the sign check
	return value.copy_abs()


def format_amount(value: Decimal) -> str:
	with localcontext() as ctx:
		ctx.Emax, ctx.Emin = MAX_EMAX, MIN_EMIN
		if value.adjusted() >= FIXED_NOTATION_LIMIT:
			return str(value.normalize())
		return str(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


class ConversionService:
	def __init__(self, aggregator: RateAggregator):
		self.aggregator = aggregator

	def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> dict:
		source = parse_currency(from_currency)
		target = parse_currency(to_currency)
		converted_amount = self.aggregator.convert(amount, source, target)
		active = self.aggregator.active

		return {
			'from_currency': source.value,
			'to_currency': target.value,
			'original_amount': amount,
			'converted_amount': converted_amount,
			'exchange_rate': active.rates[target] / active.rates[source],
			'timestamp': active.timestamp,
			'sources_used': active.sources_used,
		}

	def convert_fields(self, currency: Currency | str, raw_value: str | Decimal | None) -> dict[Currency, str]:
		"""Values for every other field of the form when `currency` is edited."""
		source = parse_currency(currency)
		value = parse_amount(raw_value)
		others = [c for c in Currency if c is not source]
		if value is None:
			return {c: '' for c in others}
		return {c: format_amount(self.aggregator.convert(value, source, c)) for c in others}


class ConverterForm:
	"""State of the multi-field converter: one text field per currency."""

	def __init__(self, conversion_service: ConversionService):
		self.conversion_service = conversion_service
		self.fields: dict[Currency, str] = {c: '' for c in Currency}
		self.last_input: Currency | None = None

	def handle_input(self, currency: Currency | str, raw_value: str) -> dict[Currency, str]:
		source = parse_currency(currency)
		others = self.conversion_service.convert_fields(source, raw_value)
		self.fields[source] = raw_value
		self.fields.update(others)

		value = parse_amount(raw_value)
		if value is not None and value > 0:
			self.last_input = source
		return dict(self.fields)

	def set_initial(self, currency: Currency | str = Currency.USD, raw_value: str = '100') -> dict[Currency, str]:
		return self.handle_input(currency, raw_value)

	def rerun(self) -> dict[Currency, str] | None:
		"""Re-convert the last field that held a positive value, e.g. after new rates arrive."""
		if self.last_input is None:
			return None
		value = parse_amount(self.fields[self.last_input])
		if value is None or value <= 0:
			return None
		return self.handle_input(self.last_input, self.fields[self.last_input])

	def on_rate_event(self, event: RateEvent, payload: Any) -> None:
		"""RateRefresher listener: seed an untouched form, re-convert after new rates."""
		if event is RateEvent.RATES_ERROR:
			return
		if event is RateEvent.RATES_LOADED and not any(self.fields.values()):
			self.set_initial()
		else:
			self.rerun()


def describe_rates(result: AggregationResult) -> list[str]:
	lines = [
		f'1 {BASE_CURRENCY.value} = {result.rates[c]:.{c.display_precision}f} {c.value} ({c.display_name})'
		for c in QUOTE_CURRENCIES
	]
	lines.append(f'Data averaged from {result.sources_used}/{result.total_sources} sources')
	return lines
