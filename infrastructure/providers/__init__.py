from .base import RateSource, SourceFetcher
from .exchangerate_api import EXCHANGERATE_API
from .frankfurter import FRANKFURTER
from .open_er_api import OPEN_ER_API

# Order matters only for logging and the contributing-source list.
DEFAULT_SOURCES: tuple[RateSource, ...] = (OPEN_ER_API, EXCHANGERATE_API, FRANKFURTER)

__all__ = [
    'DEFAULT_SOURCES',
    'EXCHANGERATE_API',
    'FRANKFURTER',
    'OPEN_ER_API',
    'RateSource',
    'SourceFetcher',
]
