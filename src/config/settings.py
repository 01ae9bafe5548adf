"""Global configuration and constants for the sketch-to-schema application."""

from __future__ import annotations

import os
from typing import Final

DATA_DIR: Final = os.environ.get("SKETCHSCHEMA_DATA_DIR", "data")

# Extraction service (Gemini vision)
GEMINI_MODEL: Final = os.environ.get("SKETCHSCHEMA_GEMINI_MODEL", "gemini-flash-latest")
GEMINI_API_KEY_ENV: Final = "GEMINI_API_KEY"
DEFAULT_RETRIES: Final = 2
DEFAULT_BACKOFF_FACTOR: Final = 0.6
DEFAULT_IMAGE_MIME: Final = "image/png"

# Card geometry (world units); must match what the card painter draws
CARD_WIDTH: Final = 240.0
CARD_HEADER_HEIGHT: Final = 45.0
CARD_ROW_HEIGHT: Final = 29.0
MISSING_COLUMN_OFFSET: Final = 20.0

# Connector routing
CONNECTOR_GAP_THRESHOLD: Final = 60.0
CONNECTOR_CONTROL_OFFSET: Final = 80.0

# Viewport
MIN_SCALE: Final = 0.2
MAX_SCALE: Final = 3.0
ZOOM_SENSITIVITY: Final = 0.001
ZOOM_STEP: Final = 0.1

# Initial layout of freshly extracted tables
LAYOUT_ORIGIN_X: Final = 50.0
LAYOUT_ORIGIN_Y: Final = 50.0
LAYOUT_SPACING_X: Final = 350.0
LAYOUT_ROW_GAP: Final = 60.0

# Position given to tables added by hand in the editor
NEW_TABLE_X: Final = 100.0
NEW_TABLE_Y: Final = 100.0
