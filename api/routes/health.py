from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_rate_aggregator, get_rate_refresher
from api.schemas import HealthResponse
from application.services import RateAggregator, RateRefresher

router = APIRouter(tags=['health'])


@router.get('/health', response_model=HealthResponse, summary='Service health')
async def health_check(
	aggregator: Annotated[RateAggregator, Depends(get_rate_aggregator)],
	refresher: Annotated[RateRefresher, Depends(get_rate_refresher)],
) -> HealthResponse:
	active = aggregator.active
	if active is None:
		return HealthResponse(
			status='degraded',
			rates_loaded=False,
			last_error=str(refresher.last_error) if refresher.last_error else None,
		)
	return HealthResponse(
		status='healthy',
		rates_loaded=True,
		from_cache=active.from_cache,
		last_update=active.timestamp,
	)
