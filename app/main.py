import secrets

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from app.config import Settings, get_settings
from app.core.constants import DEFAULT_CATALOG_PATH, TEMPLATES_DIR
from app.core.logging import setup_logging
from app.database import Base, engine, ensure_sqlite_schema
from app.models import import_all_models
from app.routers import health_router, products_router
from app.services.photo_storage import PhotoStorage


setup_logging()
settings: Settings = get_settings()

import_all_models()
Base.metadata.create_all(bind=engine)
ensure_sqlite_schema()

photo_storage = PhotoStorage.from_settings(settings)
photo_storage.ensure_dir()


app = FastAPI(title=settings.APP_NAME)
app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
app.state.templates.env.globals["photo_url_prefix"] = settings.PHOTO_URL_PREFIX.rstrip("/")
app.state.photo_storage = photo_storage
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET or secrets.token_urlsafe(32),
    session_cookie=settings.SESSION_COOKIE,
    same_site="lax",
    https_only=settings.ENVIRONMENT.lower() != "local",
)
app.mount(
    settings.PHOTO_URL_PREFIX,
    StaticFiles(directory=str(photo_storage.directory)),
    name="product_photos",
)

app.include_router(health_router)
app.include_router(products_router)


@app.get("/")
def root():
    return RedirectResponse(url=DEFAULT_CATALOG_PATH, status_code=302)


__all__ = ["app", "root"]
