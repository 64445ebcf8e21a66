from fastapi import APIRouter, Depends

from telemetry_api.api.deps import get_app_settings
from telemetry_api.config.settings import Settings
from telemetry_api.models.telemetry import IntervalSuggestion
from telemetry_api.services.polling import suggest_interval

router = APIRouter()


@router.get("", response_model=IntervalSuggestion)
async def suggest_polling_interval(settings: Settings = Depends(get_app_settings)):
    return IntervalSuggestion(
        interval=suggest_interval(
            settings.interval_min_seconds, settings.interval_max_seconds
        )
    )
