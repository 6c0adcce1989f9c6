"""
Application configuration using python-dotenv.

This module loads environment variables from .env file into os.environ
for use throughout the provider management engine.
"""

import os
import pathlib
import sys
from dotenv import load_dotenv


# Don't load .env file during testing to ensure predictable test behavior
is_testing = os.getenv("PYTEST_VERSION") is not None or "pytest" in sys.modules

# Load .env file into os.environ (only outside of testing)
if not is_testing:
    possible_paths = [
        pathlib.Path(__file__).parent.parent.parent.parent / ".env",  # repository root (src layout)
        pathlib.Path.cwd() / ".env",  # .env in current directory
        pathlib.Path.cwd().parent / ".env",  # .env in parent directory
    ]

    for env_path in possible_paths:
        if env_path.exists():
            load_dotenv(env_path)
            break


# Configuration constants with defaults
# These match the environment variables defined in .env.example
def get_database_url():
    """Get the database URL from environment."""
    return os.getenv(
        "DATABASE_URL",
        "sqlite:///./provider_management.db"
    )

DATABASE_URL = get_database_url()

# Well-known UUID of the relationship type used for supervisor -> supervisee relationships
SUPERVISOR_RELATIONSHIP_TYPE_UUID = os.getenv(
    "SUPERVISOR_RELATIONSHIP_TYPE_UUID",
    "2a5f4ff4-a179-4b8a-aa4c-40f71956ebbc"
)

# "Today" is computed in this fixed UTC offset (date granularity only)
LOCAL_TIMEZONE_OFFSET_HOURS = int(os.getenv("LOCAL_TIMEZONE_OFFSET_HOURS", "0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
