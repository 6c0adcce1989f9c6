"""Application constants and configuration values."""

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_IDENTIFIER_LENGTH = 50
UUID_LENGTH = 38

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
