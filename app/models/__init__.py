import importlib

from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.product_model import ProductModel
from app.models.sales_order_detail import SalesOrderDetail


def import_all_models() -> None:
    for module_name in (
        "app.models.product",
        "app.models.product_category",
        "app.models.product_model",
        "app.models.sales_order_detail",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Product",
    "ProductCategory",
    "ProductModel",
    "SalesOrderDetail",
    "import_all_models",
]
