import os

# Database Configuration
# Any Tortoise connection URL works (postgres://..., sqlite://...)
DB_URL = os.getenv("DATABASE_URL", "sqlite://fruit_storage.sqlite3")

# Application Metadata
PROJECT_NAME = "Fruit Storage Service"
VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Outbox Processor Configuration
OUTBOX_INTERVAL_SECONDS = float(os.getenv("OUTBOX_INTERVAL_SECONDS", 10)) # Processor runs a pass every N seconds
OUTBOX_MAX_RETRIES = int(os.getenv("OUTBOX_MAX_RETRIES", 3)) # Failed attempts before a record is dead-lettered
OUTBOX_ENABLED = os.getenv("OUTBOX_ENABLED", "true").lower() in ("1", "true", "yes")
