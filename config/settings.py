from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	REDIS_URL: str = 'redis://localhost:6379'

	# Snapshot cache
	CACHE_BACKEND: Literal['file', 'redis'] = 'file'
	CACHE_FILE: str = '.cache/exchange_rates.json'
	CACHE_KEY: str = 'exchangeRates'
	CACHE_TTL_DAYS: int = 7

	SOURCE_TIMEOUT_SECONDS: float = 5.0

	# Application
	HOST: str = '0.0.0.0'
	PORT: int = 8000
	APP_NAME: str = 'Currency Converter API'
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
