"""Configuration settings for the Repcir badge engine."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


# __file__ = src/repcir_badges/config.py
# .parent.parent.parent = project root
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Database
    badges_db_path: Optional[Path] = None
    seed_catalog_on_startup: bool = True

    # Badge rules
    default_timezone: str = "UTC"
    auto_feature_limit: int = 3  # First N earned badges surface on the profile
    featured_badge_limit: int = 6  # Hard ceiling for manually featured badges

    # Background evaluation
    evaluation_queue_size: int = 1000

    def model_post_init(self, __context) -> None:
        """Set default database path after initialization."""
        if self.badges_db_path is None:
            self.badges_db_path = PROJECT_ROOT / "badges.db"

    class Config:
        env_prefix = "REPCIR_"
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
