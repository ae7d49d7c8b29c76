# ─────────────────────────────────────────────────────────────────
# exceptions.py - Error Types for the Telemetry Core
#
# The store and validation helpers raise these.
# Only the routes layer turns them into HTTP responses.
# "No data" is NOT an error: see AverageUpload.has_data in stats.py
# ─────────────────────────────────────────────────────────────────


class TelemetryError(Exception):
    """Base class for every error raised by the telemetry core."""


class DeviceNotFoundError(TelemetryError):
    """The device identifier is not registered in the store."""

    def __init__(self, device_id: str):
        self.device_id = device_id
        super().__init__(f"device '{device_id}' not found")


class BadInputError(TelemetryError):
    """A timestamp could not be parsed or falls outside the accepted window."""
