from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from api.dependencies import get_conversion_service, get_converter_form, get_rate_aggregator, get_rate_refresher
from api.schemas import (
	ConversionResponse,
	FormConversionRequest,
	FormConversionResponse,
	FormStateResponse,
	RatesResponse,
	SupportedCurrenciesResponse,
)
from application.services import ConversionService, ConverterForm, RateAggregator, RateRefresher
from application.services.conversion_service import describe_rates
from application.utils.time import time_ago
from domain.exceptions.currency import RatesNotLoadedError
from domain.models.currency import BASE_CURRENCY, AggregationResult, Currency

router = APIRouter(prefix='/api', tags=['currency'])


def _rates_response(result: AggregationResult) -> RatesResponse:
	return RatesResponse(
		base_currency=BASE_CURRENCY.value,
		rates=result.rates.as_dict(),
		last_update=result.timestamp,
		last_update_ago=time_ago(result.timestamp),
		sources_used=result.sources_used,
		total_sources=result.total_sources,
		from_cache=result.from_cache,
		summary=describe_rates(result),
	)


@router.get(
	'/currencies',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_supported_currencies() -> SupportedCurrenciesResponse:
	return SupportedCurrenciesResponse(currencies=[c.value for c in Currency])


@router.get(
	'/rates',
	response_model=RatesResponse,
	status_code=status.HTTP_200_OK,
	summary='Get the active rate table',
)
async def get_rates(
	aggregator: Annotated[RateAggregator, Depends(get_rate_aggregator)],
) -> RatesResponse:
	result = aggregator.active
	if result is None:
		raise RatesNotLoadedError()
	return _rates_response(result)


@router.post(
	'/rates/refresh',
	response_model=RatesResponse,
	status_code=status.HTTP_200_OK,
	summary='Fetch and average live rates now',
)
async def refresh_rates(
	refresher: Annotated[RateRefresher, Depends(get_rate_refresher)],
) -> RatesResponse:
	result = await refresher.refresh()
	if result is None:
		raise refresher.last_error
	return _rates_response(result)


@router.get(
	'/convert/{from_currency}/{to_currency}/{amount}',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert currency amount',
)
async def convert_currency(
	from_currency: Annotated[str, Path(min_length=3, max_length=3)],
	to_currency: Annotated[str, Path(min_length=3, max_length=3)],
	amount: Annotated[Decimal, Path(ge=0)],
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	result = service.convert(amount, from_currency.upper(), to_currency.upper())
	return ConversionResponse(**result)


@router.post(
	'/convert',
	response_model=FormConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Fill every currency field from one edited field',
)
async def convert_fields(
	request: FormConversionRequest,
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> FormConversionResponse:
	fields = service.convert_fields(request.currency, request.amount)
	return FormConversionResponse(
		currency=request.currency,
		fields={currency.value: value for currency, value in fields.items()},
	)


def _form_state(form: ConverterForm) -> FormStateResponse:
	return FormStateResponse(
		last_input=form.last_input.value if form.last_input else None,
		fields={currency.value: value for currency, value in form.fields.items()},
	)


@router.get(
	'/form',
	response_model=FormStateResponse,
	status_code=status.HTTP_200_OK,
	summary='Current state of the converter form',
)
async def get_form(
	form: Annotated[ConverterForm, Depends(get_converter_form)],
) -> FormStateResponse:
	return _form_state(form)


@router.post(
	'/form',
	response_model=FormStateResponse,
	status_code=status.HTTP_200_OK,
	summary='Edit one field of the converter form',
)
async def edit_form(
	request: FormConversionRequest,
	form: Annotated[ConverterForm, Depends(get_converter_form)],
) -> FormStateResponse:
	raw_value = '' if request.amount is None else str(request.amount)
	form.handle_input(request.currency, raw_value)
	return _form_state(form)
