"""
Small pure helpers around inbound requests.

Field-level validation lives on ``TelemetryIn``; what is left here is the
device id fallback, the list limit and turning a pydantic error into the
short message sent back to devices.
"""

from typing import Optional

from pydantic import ValidationError

# alias -> name used in client error messages
FIELD_LABELS = {
    "deviceId": "device_id",
    "timestamp": "ts_esp",
    "temp": "temperature",
    "hum": "humidity",
    "wifi_rssi": "wifi_signal_strength",
    "free_heap": "free_memory",
}


def resolve_device_id(value: Optional[str], fallback: str) -> str:
    if not value:
        return fallback
    return value


def describe_validation_error(exc: ValidationError) -> str:
    """First error of ``exc`` as a one-line message, e.g. ``temperature is required``."""
    error = exc.errors()[0]
    loc = error["loc"]

    if not loc:
        if error["type"] == "model_type":
            return "body must be a JSON object"
        return "body must be valid JSON"

    field = FIELD_LABELS.get(str(loc[0]), str(loc[0]))
    path = ".".join([field] + [str(part) for part in loc[1:]])

    # a JSON null counts as absent
    if error["type"] == "missing" or (len(loc) == 1 and error.get("input") is None):
        return f"{path} is required"
    return f"{path}: {error['msg']}"


def clamp_limit(raw: Optional[str], default: int, maximum: int) -> int:
    if raw is None:
        return default
    try:
        limit = int(raw.strip())
    except ValueError:
        return default
    return max(1, min(limit, maximum))
