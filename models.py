# ─────────────────────────────────────────────────────────────────
# models.py - Data Models (Pydantic Schemas)
#
# All request and response shapes of the HTTP API live here.
# Pydantic rejects missing fields and wrong types before any
# route code runs. sent_at stays a plain string on purpose:
# validation.py owns the RFC 3339 rules and the sanity window.
# ─────────────────────────────────────────────────────────────────

from typing import List

from pydantic import BaseModel, Field, StrictInt

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class DeviceCreate(BaseModel):
    """
    Body for POST /api/v1/devices
    {
        "device_id": "60-6b-44-84-dc-64"
    }
    """

    device_id: str = Field(min_length=1)


class DeviceCreated(BaseModel):
    device_id: str
    created: bool     # False when the device was already registered


class DeviceList(BaseModel):
    devices: List[str]
    total: int


class HeartbeatRequest(BaseModel):
    """
    Body for POST /api/v1/devices/{device_id}/heartbeat
    {
        "sent_at": "2025-10-25T10:00:00Z"
    }
    """

    sent_at: str


class UploadStatsRequest(BaseModel):
    """
    Body for POST /api/v1/devices/{device_id}/stats
    {
        "sent_at": "2025-10-25T10:00:00Z",
        "upload_time": 5000000000
    }
    upload_time is a signed 64-bit nanosecond count. Strings, floats
    and booleans are rejected, not coerced.
    """

    sent_at: str
    upload_time: StrictInt = Field(ge=INT64_MIN, le=INT64_MAX)


class StatsResponse(BaseModel):
    """
    Body of GET /api/v1/devices/{device_id}/stats
    {
        "uptime": 66.67,
        "avg_upload_time": "3m7.5s"
    }
    """

    uptime: float          # percentage, 2 decimals
    avg_upload_time: str   # duration string, "0s" when no uploads


class ErrorResponse(BaseModel):
    msg: str
