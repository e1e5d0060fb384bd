"""
LiquidLens Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    VERSION: str = "1.0.0"
    CORE_VERSION: str = "1.0.0"

    # --- Catalog ---
    # Empty string means "use the bundled default catalog"
    CATALOG_PATH: str = os.getenv("LIQUIDLENS_CATALOG_PATH", "")
    DISPLAY_MODE: str = os.getenv("LIQUIDLENS_DISPLAY_MODE", "friendly")

    # --- Cache ---
    CACHE_TTL: int = int(os.getenv("LIQUIDLENS_CACHE_TTL", "3600"))
    CACHE_MAX_ENTRIES: int = int(os.getenv("LIQUIDLENS_CACHE_MAX", "500"))

    # --- Requests ---
    MAX_TEXT_LENGTH: int = int(os.getenv("LIQUIDLENS_MAX_TEXT", "50000"))

    # --- Server ---
    HOST: str = os.getenv("LIQUIDLENS_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("LIQUIDLENS_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("LIQUIDLENS_CORS_ORIGINS", "*")


settings = Settings()
