from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    redis_url: str
    redis_max_connections: int = 20
    redis_socket_timeout: int = 5
    key_prefix: str = "telemetry"

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    max_body_bytes: int = 1024 * 1024

    latest_default_limit: int = 50
    latest_max_limit: int = 1000

    interval_min_seconds: int = 4
    interval_max_seconds: int = 60

    default_device_id: str = "esp32-unknown"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
