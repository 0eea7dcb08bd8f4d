import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.currency import InvalidCurrencyError, RateAggregationError, RatesNotLoadedError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(InvalidCurrencyError)
	async def invalid_currency_handler(request: Request, exc: InvalidCurrencyError):
		return JSONResponse(status_code=400, content={'detail': str(exc)})

	@app.exception_handler(RatesNotLoadedError)
	async def rates_not_loaded_handler(request: Request, exc: RatesNotLoadedError):
		return JSONResponse(status_code=503, content={'detail': str(exc)})

	@app.exception_handler(RateAggregationError)
	async def aggregation_error_handler(request: Request, exc: RateAggregationError):
		logger.error(f'Rate aggregation error: {exc}')
		return JSONResponse(
			status_code=503, content={'detail': f'Exchange rate service unavailable: {exc}'}
		)
