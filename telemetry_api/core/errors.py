class TelemetryError(Exception):
    pass


class ClientValidationError(TelemetryError, ValueError):
    status_code = 400


class PayloadTooLargeError(ClientValidationError):
    status_code = 413


class StorageError(TelemetryError):
    pass


class StartupError(TelemetryError):
    pass
