from .requests import FormConversionRequest
from .responses import (
	ConversionResponse,
	FormConversionResponse,
	FormStateResponse,
	HealthResponse,
	RatesResponse,
	SupportedCurrenciesResponse,
)

__all__ = [
	'ConversionResponse',
	'FormConversionRequest',
	'FormConversionResponse',
	'FormStateResponse',
	'HealthResponse',
	'RatesResponse',
	'SupportedCurrenciesResponse',
]
