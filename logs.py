# ─────────────────────────────────────────────────────────────────
# logs.py - Logging Setup
#
# Format applied to every log line:
#   %(asctime)s    → timestamp e.g. "2026-03-01 10:34:22"
#   %(levelname)s  → severity e.g. "INFO", "WARNING"
#   %(name)s       → which logger sent this e.g. "store"
#   %(message)s    → the actual message
#
# Each module keeps its own named logger:
#   "app", "routes", "store", "loader"
# ─────────────────────────────────────────────────────────────────

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist, so set the level explicitly
    logging.getLogger().setLevel(level.upper())
