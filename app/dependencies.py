from fastapi import Request

from app.database.session import get_db
from app.services.photo_storage import PhotoStorage


def get_photo_storage(request: Request) -> PhotoStorage:
    return request.app.state.photo_storage


__all__ = ["get_db", "get_photo_storage"]
