from fastapi import Depends, Request

from telemetry_api.config.settings import Settings
from telemetry_api.services.telemetry_service import TelemetryService
from telemetry_api.storage.telemetry_store import TelemetryStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_telemetry_store(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> TelemetryStore:
    return TelemetryStore(request.app.state.redis, settings.key_prefix)


def get_telemetry_service(
    store: TelemetryStore = Depends(get_telemetry_store),
    settings: Settings = Depends(get_app_settings),
) -> TelemetryService:
    return TelemetryService(store, settings)
