"""Service settings, read from ``HIVE_*`` environment variables or ``.env``.

``canonical_timestamps`` is off by default. Readings are ordered by comparing
timestamp strings, so producers that do not send zero-padded UTC
``YYYY-MM-DDTHH:MM:SSZ`` (for example ``Wed Jan 03 2024 ...`` style dates)
get misordered query results. Set ``HIVE_CANONICAL_TIMESTAMPS=true`` to
reject such readings at ingestion instead.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    redis_url: str = "redis://localhost:6379"
    redis_max_connections: int = 50
    redis_socket_timeout: int = 5

    default_query_limit: int = 100
    canonical_timestamps: bool = False

    mqtt_url: Optional[str] = None
    mqtt_topic: str = "metrics"
    mqtt_client_id: str = "hive-api"
    mqtt_reconnect_interval: int = 5
    mqtt_max_reconnect_interval: int = 60

    log_level: str = "INFO"
    log_file: Optional[str] = None

    class Config:
        env_file = ".env"
        env_prefix = "HIVE_"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
