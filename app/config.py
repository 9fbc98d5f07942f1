from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Online Shop Catalog Admin"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./catalog.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Session (flash messages)
    # ==============================
    SESSION_SECRET: Optional[str] = None
    SESSION_COOKIE: str = "catalog_session"

    # ==============================
    # Product photos
    # ==============================
    PHOTO_DIR: str = "static/images/products"
    PHOTO_URL_PREFIX: str = "/images/products"
    PHOTO_ALLOWED_EXTENSIONS: Optional[str] = ".jpg,.jpeg,.png,.gif,.webp"
    PHOTO_MAX_BYTES: int = 10 * 1024 * 1024
    PHOTO_CLEANUP_ON_DELETE: bool = True

    # ==============================
    # Catalog defaults
    # ==============================
    DEFAULT_PRODUCT_NAME: str = "Unnamed Product"

    def photo_extensions(self) -> Optional[set[str]]:
        """Allowed upload extensions, or None when any extension is accepted."""
        if not self.PHOTO_ALLOWED_EXTENSIONS:
            return None
        extensions = set()
        for value in self.PHOTO_ALLOWED_EXTENSIONS.split(","):
            value = value.strip().lower()
            if not value:
                continue
            if not value.startswith("."):
                value = "." + value
            extensions.add(value)
        return extensions or None


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
