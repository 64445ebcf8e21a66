import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from telemetry_api.config.settings import Settings
from telemetry_api.core.errors import ClientValidationError
from telemetry_api.models.telemetry import TelemetryIn, TelemetryRecord
from telemetry_api.services import normalize
from telemetry_api.storage.telemetry_store import TelemetryStore

logger = logging.getLogger(__name__)


class TelemetryService:
    def __init__(self, store: TelemetryStore, settings: Settings):
        self.store = store
        self.settings = settings

    def build_record(self, body: bytes, received_at: datetime) -> TelemetryRecord:
        try:
            reading = TelemetryIn.model_validate_json(
                body, context={"received_at": received_at}
            )
        except ValidationError as exc:
            raise ClientValidationError(
                normalize.describe_validation_error(exc)
            ) from exc

        return TelemetryRecord(
            device_id=normalize.resolve_device_id(
                reading.device_id, self.settings.default_device_id
            ),
            device_timestamp=reading.device_timestamp,
            server_timestamp=received_at,
            temperature=reading.temperature,
            humidity=reading.humidity,
            touch=reading.touch,
            wifi_signal_strength=reading.wifi_signal_strength,
            free_memory=reading.free_memory,
        )

    async def ingest(self, body: bytes) -> str:
        record = self.build_record(body, datetime.now(timezone.utc))
        record_id = await self.store.insert(record)
        logger.info("Stored reading %s from %s", record_id, record.device_id)
        return record_id

    async def latest(self, raw_limit: Optional[str]) -> list[TelemetryRecord]:
        limit = normalize.clamp_limit(
            raw_limit,
            self.settings.latest_default_limit,
            self.settings.latest_max_limit,
        )
        return await self.store.latest(limit)

    async def count(self) -> int:
        return await self.store.count()
