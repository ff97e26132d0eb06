"""Configuration for the part cross-reference MCP server."""

import os
from pathlib import Path

# Server settings
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))

# Data locations
_PACKAGE_DATA_DIR = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.getenv("PARTXREF_DATA_DIR", str(_PACKAGE_DATA_DIR)))
PARTS_CATALOG_PATH = Path(os.getenv("PARTS_CATALOG_PATH", str(DATA_DIR / "catalog.json")))
CHECKPOINT_DB_PATH = Path(os.getenv("PARTXREF_DB_PATH", str(DATA_DIR / "parts_lists.db")))

# External resolution/matching service (batch validation producer)
VALIDATION_SERVICE_URL = os.getenv("VALIDATION_SERVICE_URL", f"http://127.0.0.1:{HTTP_PORT}")
VALIDATION_ENDPOINT = "/api/parts-list/validate"
VALIDATION_REQUEST_TIMEOUT = float(os.getenv("VALIDATION_REQUEST_TIMEOUT", "300"))  # Long-lived stream
BATCH_CONCURRENCY = int(os.getenv("BATCH_CONCURRENCY", "3"))  # Rows resolved in parallel per chunk
MAX_BATCH_ROWS = 5000
CATALOG_CURRENCY = os.getenv("CATALOG_CURRENCY", "USD")  # Currency of catalog unit prices

# Checkpointing
CHECKPOINT_EVERY = int(os.getenv("CHECKPOINT_EVERY", "5"))  # Processed records between checkpoints
CHECKPOINT_QUEUE_SIZE = 4  # Pending snapshots before the oldest is superseded
CHECKPOINT_MAX_RETRIES = int(os.getenv("CHECKPOINT_MAX_RETRIES", "3"))
CHECKPOINT_RETRY_DELAY = 0.5  # Seconds, doubled per attempt

# Matching bands
THRESHOLD_REVIEW_BAND = 0.02  # Wrong-side margin on threshold rules that still earns a review
FIT_TOLERANCE = 0.10  # Default symmetric window for fit rules
FIT_REVIEW_BAND = 0.20  # Wider window for fit rules that earns a review
MAX_RECOMMENDATIONS = 50
DEFAULT_RECOMMENDATION_LIMIT = 10
