"""
Application configuration for the Grocery Inventory Manager.

Environment variables override all defaults.
"""

import os


class Settings:
    # Storage - "sqlite://" keeps everything in memory for the session
    DATABASE_URL: str = os.getenv("GROCERY_DATABASE_URL", "sqlite://")

    # Where report files land when a bare filename is given
    REPORT_DIR: str = os.getenv("GROCERY_REPORT_DIR", ".")

    # Logging
    LOG_LEVEL: str = os.getenv("GROCERY_LOG_LEVEL", "WARNING").upper()

    APP_NAME: str = "Grocery Inventory Manager"


settings = Settings()
