class CurrencyException(Exception):
    pass


class InvalidCurrencyError(CurrencyException):
    pass


class SourceFetchError(CurrencyException):
    pass


class RateAggregationError(CurrencyException):
    pass


class AllSourcesFailedError(RateAggregationError):
    def __init__(self, total_sources: int):
        self.total_sources = total_sources
        super().__init__(f'All {total_sources} exchange rate sources failed')


class MissingCurrencyRateError(RateAggregationError):
    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f'No source provided {currency} exchange rate')


class RatesNotLoadedError(CurrencyException):
    def __init__(self):
        super().__init__('Exchange rates not loaded')


class CacheError(CurrencyException):
    pass


class CacheReadError(CacheError):
    pass


class CacheWriteError(CacheError):
    pass
