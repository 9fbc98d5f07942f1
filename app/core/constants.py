from pathlib import Path


APP_DIR = Path(__file__).resolve().parents[1]

TEMPLATES_DIR = APP_DIR / "templates"

DEFAULT_CATALOG_PATH = "/products"

FLASH_SESSION_KEY = "flash"

DELETE_BLOCKED_MESSAGE = (
    "Product '{name}' cannot be deleted because there are associated orders."
)

PRODUCT_NUMBER_FALLBACK_FORMAT = "P%Y%m%d%H%M%S%f"
