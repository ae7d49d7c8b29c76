# ─────────────────────────────────────────────────────────────────
# routes/devices.py - All Device Endpoints
#
# This file owns the HTTP side of device telemetry:
#   it parses the request, calls the store / stats engine,
#   and shapes the response.
# It does NOT know how data is stored (that's database.py)
# It does NOT compute anything itself (that's stats.py)
# Core errors (DeviceNotFoundError, BadInputError) are turned into
# 404 / 400 responses by the handlers registered in main.py.
#
# Route functions are plain `def`: FastAPI runs them in its thread
# pool, which is why DeviceStore is lock-protected.
# ─────────────────────────────────────────────────────────────────

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from database import DeviceStore
from models import (
    DeviceCreate,
    DeviceCreated,
    DeviceList,
    ErrorResponse,
    HeartbeatRequest,
    StatsResponse,
    UploadStatsRequest,
)
from stats import compute_avg_upload, compute_uptime, round2
from validation import TimestampPolicy, parse_and_validate

logger = logging.getLogger("routes")

router = APIRouter(
    prefix="/api/v1/devices",
    tags=["Devices"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


# ── dependencies ─────────────────────────────────────────────────

def get_store(request: Request) -> DeviceStore:
    return request.app.state.store


def get_timestamp_policy(request: Request) -> TimestampPolicy:
    return request.app.state.settings.timestamp_policy()


# ─────────────────────────────────────────────────────────────────
# POST /api/v1/devices - Pre-register a device
# ─────────────────────────────────────────────────────────────────

@router.post("", response_model=DeviceCreated, status_code=status.HTTP_201_CREATED)
def register_device(
    body: DeviceCreate,
    response: Response,
    store: DeviceStore = Depends(get_store),
):
    """
    Registers a device without sending telemetry.
    Idempotent: 201 the first time, 200 afterwards.
    """
    created = store.register(body.device_id)

    if not created:
        response.status_code = status.HTTP_200_OK

    return DeviceCreated(device_id=body.device_id, created=created)


# ─────────────────────────────────────────────────────────────────
# GET /api/v1/devices - List registered devices
# ─────────────────────────────────────────────────────────────────

@router.get("", response_model=DeviceList)
def list_devices(store: DeviceStore = Depends(get_store)):
    devices = store.device_ids()
    return DeviceList(devices=devices, total=len(devices))


# ─────────────────────────────────────────────────────────────────
# POST /api/v1/devices/{device_id}/heartbeat - Record a heartbeat
# ─────────────────────────────────────────────────────────────────

@router.post("/{device_id}/heartbeat", status_code=status.HTTP_204_NO_CONTENT)
def post_heartbeat(
    device_id: str,
    body: HeartbeatRequest,
    store: DeviceStore = Depends(get_store),
    policy: TimestampPolicy = Depends(get_timestamp_policy),
):
    """
    Flow:
    1. Parse sent_at (RFC 3339) → 400 if malformed
    2. Check it is inside the sanity window → 400 if not
    3. Append to the device's heartbeat history
       (404 if the device is unknown and auto-registration is off)
    """
    sent_at = parse_and_validate(body.sent_at, policy)
    store.record_heartbeat(device_id, sent_at)

    logger.info(f"💓 Heartbeat: '{device_id}' at {sent_at.isoformat()}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─────────────────────────────────────────────────────────────────
# POST /api/v1/devices/{device_id}/stats - Record an upload sample
# ─────────────────────────────────────────────────────────────────

@router.post("/{device_id}/stats", status_code=status.HTTP_204_NO_CONTENT)
def post_upload_stats(
    device_id: str,
    body: UploadStatsRequest,
    store: DeviceStore = Depends(get_store),
    policy: TimestampPolicy = Depends(get_timestamp_policy),
):
    """
    sent_at is validated like a heartbeat but NOT stored as one:
    only upload_time is recorded.
    """
    parse_and_validate(body.sent_at, policy)
    store.record_upload(device_id, body.upload_time)

    logger.info(f"📤 Upload stats: '{device_id}' | {body.upload_time}ns")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─────────────────────────────────────────────────────────────────
# GET /api/v1/devices/{device_id}/stats - Uptime & average upload
# ─────────────────────────────────────────────────────────────────

@router.get(
    "/{device_id}/stats",
    response_model=StatsResponse,
    responses={204: {"description": "Device has no telemetry yet"}},
)
def get_stats(device_id: str, store: DeviceStore = Depends(get_store)):
    """
    200 → {"uptime": 66.67, "avg_upload_time": "5ns"}
    204 → device exists but has sent nothing yet
    404 → unknown device
    """
    snapshot = store.snapshot(device_id)

    if snapshot.is_empty:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    average = compute_avg_upload(snapshot)

    return StatsResponse(
        uptime=round2(compute_uptime(snapshot)),
        avg_upload_time=average.duration,
    )
