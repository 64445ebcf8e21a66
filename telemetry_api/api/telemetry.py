import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from telemetry_api.api.deps import get_app_settings, get_telemetry_service
from telemetry_api.config.settings import Settings
from telemetry_api.core.errors import PayloadTooLargeError
from telemetry_api.models.telemetry import IngestResult, TelemetryCount, TelemetryRecord
from telemetry_api.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_capped_body(request: Request, max_bytes: int) -> bytes:
    # chunked uploads carry no Content-Length for the middleware to check
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLargeError("payload too large")
    return bytes(body)


@router.post("", response_model=IngestResult, status_code=201)
async def ingest_reading(
    request: Request,
    service: TelemetryService = Depends(get_telemetry_service),
    settings: Settings = Depends(get_app_settings),
):
    body = await read_capped_body(request, settings.max_body_bytes)
    logger.debug("Payload received: %r", body)

    record_id = await service.ingest(body)
    return IngestResult(id=record_id)


@router.get(
    "/latest", response_model=list[TelemetryRecord], response_model_exclude_none=True
)
async def latest_readings(
    limit: Optional[str] = None,
    service: TelemetryService = Depends(get_telemetry_service),
):
    return await service.latest(limit)


@router.get("/count", response_model=TelemetryCount)
async def count_readings(service: TelemetryService = Depends(get_telemetry_service)):
    return TelemetryCount(count=await service.count())
