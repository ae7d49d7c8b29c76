# ─────────────────────────────────────────────────────────────────
# database.py - In-Memory Device Store
#
# This file owns all telemetry storage for the application.
# Nothing else touches the device records directly: routes go
# through DeviceStore and get back immutable snapshots.
#
# Structure:
#   Key   → device id (string) e.g. "60-6b-44-84-dc-64"
#   Value → DeviceRecord with two append-only lists
#
# Resets on server restart. One store is created per app by
# main.create_app() and shared by every request thread.
# ─────────────────────────────────────────────────────────────────

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from exceptions import DeviceNotFoundError

logger = logging.getLogger("store")


@dataclass
class DeviceRecord:
    """
    Full telemetry history of one device.

    heartbeats      → UTC datetimes in arrival order (NOT sorted)
    upload_samples  → upload durations in nanoseconds, arrival order

    Only DeviceStore appends to these lists, always under its lock.
    """

    heartbeats: List[datetime] = field(default_factory=list)
    upload_samples: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class DeviceSnapshot:
    """Point-in-time copy of a DeviceRecord, safe to read without the lock."""

    device_id: str
    heartbeats: Tuple[datetime, ...] = ()
    upload_samples: Tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.heartbeats and not self.upload_samples


class DeviceStore:
    """
    Thread-safe registry of device records.

    A single lock guards both the mapping and every record in it.
    Appends and snapshot copies are the only work done while holding
    it, so a snapshot always sees a whole prefix of each list.

    auto_register decides what a write to an unknown device does:
      True  → the device is created on the fly
      False → DeviceNotFoundError (device must be pre-registered)
    The same rule applies to heartbeats and upload samples.
    """

    def __init__(self, auto_register: bool = True):
        self.auto_register = auto_register
        self._lock = threading.Lock()
        self._devices: Dict[str, DeviceRecord] = {}

    def __contains__(self, device_id: str) -> bool:
        with self._lock:
            return device_id in self._devices

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def device_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._devices)

    def ensure(self, device_id: str) -> DeviceRecord:
        """Returns the record for device_id, creating it if absent."""
        with self._lock:
            return self._ensure_locked(device_id)

    def register(self, device_id: str) -> bool:
        """Like ensure(), but reports whether the device was newly created."""
        with self._lock:
            if device_id in self._devices:
                return False
            self._ensure_locked(device_id)
            return True

    def record_heartbeat(self, device_id: str, timestamp: datetime) -> None:
        """Appends a heartbeat, normalized to UTC."""
        timestamp = timestamp.astimezone(timezone.utc)
        with self._lock:
            record = self._writable_record(device_id)
            record.heartbeats.append(timestamp)
        logger.debug(f"Heartbeat stored for '{device_id}' at {timestamp.isoformat()}")

    def record_upload(self, device_id: str, duration_ns: int) -> None:
        """Appends an upload duration sample (nanoseconds)."""
        with self._lock:
            record = self._writable_record(device_id)
            record.upload_samples.append(int(duration_ns))
        logger.debug(f"Upload sample stored for '{device_id}': {duration_ns}ns")

    def snapshot(self, device_id: str) -> DeviceSnapshot:
        """
        Copies the device's history under the lock.
        Raises DeviceNotFoundError for unknown ids, never returns
        an empty stand-in for a device that does not exist.
        """
        with self._lock:
            record = self._devices.get(device_id)
            if record is None:
                raise DeviceNotFoundError(device_id)
            return DeviceSnapshot(
                device_id=device_id,
                heartbeats=tuple(record.heartbeats),
                upload_samples=tuple(record.upload_samples),
            )

    # ── helpers (caller must hold self._lock) ────────────────────

    def _ensure_locked(self, device_id: str) -> DeviceRecord:
        record = self._devices.get(device_id)
        if record is None:
            record = DeviceRecord()
            self._devices[device_id] = record
            logger.info(f"✅ Device registered: '{device_id}'")
        return record

    def _writable_record(self, device_id: str) -> DeviceRecord:
        if self.auto_register:
            return self._ensure_locked(device_id)
        record = self._devices.get(device_id)
        if record is None:
            raise DeviceNotFoundError(device_id)
        return record
