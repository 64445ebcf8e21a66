import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

logger = logging.getLogger(__name__)

# ints are fine, bools, strings, inf and nan are not
Reading = Annotated[float, Field(strict=True, allow_inf_nan=False)]


class TelemetryIn(BaseModel):
    """Reading as posted by a device.

    Older firmware sends short field names (``temp``, ``hum``, ``wifi_rssi``,
    ``free_heap``), accepted here as aliases. Fields are declared in the order
    they are checked, so the first error reported is the first failing check.
    """

    device_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("device_id", "deviceId")
    )
    device_timestamp: datetime = Field(
        validation_alias=AliasChoices("ts_esp", "timestamp")
    )
    temperature: Reading = Field(validation_alias=AliasChoices("temperature", "temp"))
    humidity: Reading = Field(validation_alias=AliasChoices("humidity", "hum"))
    touch: Optional[dict[str, Optional[Reading]]] = None
    wifi_signal_strength: Optional[Reading] = Field(
        None, validation_alias=AliasChoices("wifi_signal_strength", "wifi_rssi")
    )
    free_memory: Optional[Reading] = Field(
        None, validation_alias=AliasChoices("free_memory", "free_heap")
    )

    @field_validator("device_timestamp", mode="wrap")
    @classmethod
    def fall_back_to_received_at(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> datetime:
        if value is None:
            return handler(value)

        # only ISO-8601 strings; unix numbers are not accepted as device time
        parsed = None
        if isinstance(value, str):
            try:
                parsed = handler(value)
            except ValidationError:
                pass

        if parsed is None:
            logger.warning("Invalid device timestamp %r, using server time", value)
            received_at = (info.context or {}).get("received_at")
            return received_at or datetime.now(timezone.utc)

        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @field_validator("touch")
    @classmethod
    def drop_empty_channels(
        cls, value: Optional[dict[str, Optional[float]]]
    ) -> Optional[dict[str, float]]:
        if value is None:
            return None
        return {channel: reading for channel, reading in value.items() if reading is not None}


class TelemetryRecord(BaseModel):
    id: Optional[str] = None
    device_id: str
    device_timestamp: datetime
    server_timestamp: datetime
    temperature: float
    humidity: float
    touch: Optional[dict[str, float]] = None
    wifi_signal_strength: Optional[float] = None
    free_memory: Optional[float] = None


class IngestResult(BaseModel):
    ok: bool = True
    id: str


class TelemetryCount(BaseModel):
    count: int


class IntervalSuggestion(BaseModel):
    interval: int
