import tempfile
import unittest
from decimal import Decimal
from functools import partial

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database.base import Base
from app.database.engine import set_sqlite_pragmas
from app.models import import_all_models
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.product_model import ProductModel
from app.models.sales_order_detail import SalesOrderDetail
from app.services.photo_storage import PhotoStorage


class CatalogTestCase(unittest.TestCase):
    """In-memory catalog database plus a temporary photo directory per test."""

    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(self.engine, "connect", partial(set_sqlite_pragmas, use_wal=False))
        import_all_models()
        Base.metadata.create_all(bind=self.engine)
        self.db = sessionmaker(bind=self.engine, expire_on_commit=False)()

        self._photo_dir = tempfile.TemporaryDirectory()
        self.storage = PhotoStorage(
            self._photo_dir.name,
            allowed_extensions={".jpg", ".png"},
            max_bytes=1024,
        )
        self.settings = Settings(_env_file=None, DEFAULT_PRODUCT_NAME="Unnamed Product")

    def tearDown(self):
        self.db.close()
        self.engine.dispose()
        self._photo_dir.cleanup()

    def add_category(self, name="Helmets", category_id=None):
        category = ProductCategory(id=category_id, name=name)
        self.db.add(category)
        self.db.commit()
        return category

    def add_model(self, name="Sport-100", model_id=None):
        product_model = ProductModel(id=model_id, name=name)
        self.db.add(product_model)
        self.db.commit()
        return product_model

    def add_product(self, product_number, *, name="Sport-100 Helmet", category=None, **fields):
        fields.setdefault("list_price", Decimal("34.99"))
        product = Product(
            name=name,
            product_number=product_number,
            product_category_id=category.id if category is not None else None,
            **fields,
        )
        self.db.add(product)
        self.db.commit()
        return product

    def add_order_lines(self, product, count, sales_order_id=71774):
        for _ in range(count):
            self.db.add(
                SalesOrderDetail(
                    sales_order_id=sales_order_id,
                    product_id=product.id,
                    order_qty=1,
                    unit_price=product.list_price,
                )
            )
        self.db.commit()

    def count_rows(self, model, *criteria):
        return self.db.scalar(select(func.count()).select_from(model).where(*criteria))

    def stored_photos(self):
        return sorted(path.name for path in self.storage.directory.iterdir())
