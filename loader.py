# ─────────────────────────────────────────────────────────────────
# loader.py - Device Bootstrap from CSV
#
# Runs once at startup, before any request is served.
# Expected file layout:
#
#   device_id
#   60-6b-44-84-dc-64
#   b4-45-52-a2-f1-3c
#
# The header row is skipped. Blank ids and duplicates are ignored.
# If the file itself cannot be read the error propagates and the
# server refuses to start.
# ─────────────────────────────────────────────────────────────────

import csv
import logging
from pathlib import Path
from typing import Union

from database import DeviceStore

logger = logging.getLogger("loader")


def load_devices_from_csv(path: Union[str, Path], store: DeviceStore) -> int:
    """Registers every device id listed in the CSV. Returns how many were new."""
    path = Path(path)

    with path.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))

    added = 0
    skipped = 0

    for row in rows[1:]:
        device_id = row[0].strip() if row else ""
        if device_id and store.register(device_id):
            added += 1
        else:
            skipped += 1

    logger.info(f"📋 Loaded {added} devices from {path} ({skipped} rows skipped)")
    return added
