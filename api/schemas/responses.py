from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ConversionResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	original_amount: Decimal = Field(..., description='Original amount requested')
	converted_amount: Decimal = Field(..., description='Converted amount')
	exchange_rate: Decimal = Field(..., description='Exchange rate used for conversion')
	timestamp: datetime = Field(..., description='When the rates were aggregated')
	sources_used: int = Field(..., description='Number of sources behind the rates')

	class ConfigDict:
		json_schema_extra = {
			'example': {
				'from_currency': 'USD',
				'to_currency': 'ARS',
				'original_amount': 100,
				'converted_amount': 101000,
				'exchange_rate': 1010,
				'timestamp': '2025-09-27T10:30:00Z',
				'sources_used': 2,
			}
		}


class FormConversionResponse(BaseModel):
	currency: str = Field(..., description='Field the user edited')
	fields: dict[str, str] = Field(..., description='Values for every other field, empty when the input is invalid')


class FormStateResponse(BaseModel):
	last_input: str | None = Field(None, description='Field re-converted when new rates arrive')
	fields: dict[str, str] = Field(..., description='Every field of the converter, as shown')


class RatesResponse(BaseModel):
	base_currency: str = Field(..., description='Currency all rates are relative to')
	rates: dict[str, Decimal] = Field(..., description='Units of each currency per one base unit')
	last_update: datetime = Field(..., description='When the rates were aggregated')
	last_update_ago: str = Field(..., description='Age of the rates, human readable')
	sources_used: int
	total_sources: int
	from_cache: bool
	summary: list[str] = Field(default_factory=list)


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes, base first')

	class ConfigDict:
		json_schema_extra = {'examples': [{'currencies': ['USD', 'ARS', 'AED', 'CNY']}]}


class HealthResponse(BaseModel):
	status: str
	rates_loaded: bool
	from_cache: bool | None = None
	last_update: datetime | None = None
	last_error: str | None = None
