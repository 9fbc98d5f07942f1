import os
import tempfile

# Settings are read once per process; point them at throwaway storage before
# anything under app/ is imported.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PHOTO_DIR", tempfile.mkdtemp(prefix="catalog-photos-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
