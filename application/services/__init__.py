from .conversion_service import ConversionService, ConverterForm
from .rate_service import RateAggregator
from .refresh_service import RateEvent, RateRefresher

__all__ = ['ConversionService', 'ConverterForm', 'RateAggregator', 'RateEvent', 'RateRefresher']
