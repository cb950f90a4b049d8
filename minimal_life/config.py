# config.py
"""
Application configuration constants for Minimal Life
"""
import os

# Store settings
DB_PATH = os.environ.get("MINIMAL_LIFE_DB", "minimal_life.db")
STORE_NAME = "discarded_items"
DATE_INDEX_NAME = "idx_discarded_items_date"
SCHEMA_VERSION = 1
STORE_BUSY_TIMEOUT_SECS = 5.0

# Record limits
REASON_MAX_LENGTH = 50
STORAGE_DATE_FORMAT = "%Y-%m-%d"

# Normalized image contract
NORMALIZED_SIZE = 512
NORMALIZED_FORMAT = "JPEG"
NORMALIZED_QUALITY = 90  # equivalent to a 0.9 canvas quality
FLATTEN_BACKGROUND = (255, 255, 255)

# Collage layout
THUMB_SIZE = 200
CELL_PADDING = 10
HEADER_HEIGHT = 80
COLLAGE_TITLE = "Minimal Life"
HEADER_DATE_FORMAT = "%Y.%m.%d"
TITLE_FONT_SIZE = 28
SUBTITLE_FONT_SIZE = 16

# Collage colours
CANVAS_BACKGROUND = (250, 250, 248)
CELL_BACKGROUND = (235, 235, 232)
CELL_BORDER = (210, 210, 205)
CELL_BORDER_WIDTH = 1
TITLE_COLOR = (34, 34, 34)
SUBTITLE_COLOR = (119, 119, 119)

# Export settings
COLLAGE_PREFIX = "minimal-life-collage"
COLLAGE_EXTENSION = ".png"

# Cache settings
MAX_CACHE_SIZE = 50
CACHE_CLEANUP_THRESHOLD = 0.8  # Cleanup when cache reaches 80% of max size

# Logging
LOGGER_NAME = "minimal_life"
LOG_FILE = "minimal_life.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5
