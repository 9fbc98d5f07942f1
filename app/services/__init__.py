from app.services.photo_storage import PhotoStorage, PhotoUpload
from app.services.product_service import (
    create_product,
    delete_product,
    get_product_view,
    list_products,
    prepare_delete,
    update_product,
)

__all__ = [
    "PhotoStorage",
    "PhotoUpload",
    "create_product",
    "delete_product",
    "get_product_view",
    "list_products",
    "prepare_delete",
    "update_product",
]
