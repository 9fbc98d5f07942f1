import argparse
import logging
from decimal import Decimal

from sqlalchemy import delete, select

from app.core.logging import setup_logging
from app.database import Base, SessionLocal, engine, ensure_sqlite_schema
from app.models import import_all_models
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.product_model import ProductModel
from app.models.sales_order_detail import SalesOrderDetail

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample catalog data.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()

    db = SessionLocal()
    try:
        if args.reset:
            db.execute(delete(SalesOrderDetail))
            db.execute(delete(Product))
            db.execute(delete(ProductModel))
            db.execute(delete(ProductCategory))
            db.commit()

        has_category = db.execute(select(ProductCategory.id).limit(1)).first()
        if has_category:
            logger.info("Seed skipped: categories already exist.")
            return

        categories = [
            ProductCategory(name="Mountain Bikes"),
            ProductCategory(name="Helmets"),
            ProductCategory(name="Jerseys"),
        ]
        models = [
            ProductModel(name="Mountain-100"),
            ProductModel(name="Sport-100"),
            ProductModel(name="Long-Sleeve Logo Jersey"),
        ]
        db.add_all(categories + models)
        db.flush()

        products = [
            Product(
                name="Mountain-100 Silver, 38",
                product_number="BK-M82S-38",
                color="Silver",
                standard_cost=Decimal("1912.15"),
                list_price=Decimal("3399.99"),
                size="38",
                product_category_id=categories[0].id,
                product_model_id=models[0].id,
            ),
            Product(
                name="Sport-100 Helmet, Red",
                product_number="HL-U509-R",
                color="Red",
                standard_cost=Decimal("13.09"),
                list_price=Decimal("34.99"),
                product_category_id=categories[1].id,
                product_model_id=models[1].id,
            ),
            Product(
                name="Long-Sleeve Logo Jersey, M",
                product_number="LJ-0192-M",
                color="Multi",
                standard_cost=Decimal("38.49"),
                list_price=Decimal("49.99"),
                size="M",
                product_category_id=categories[2].id,
                product_model_id=models[2].id,
            ),
        ]
        db.add_all(products)
        db.flush()

        order_lines = [
            SalesOrderDetail(
                sales_order_id=71774,
                product_id=products[0].id,
                order_qty=1,
                unit_price=Decimal("3399.99"),
            ),
            SalesOrderDetail(
                sales_order_id=71776,
                product_id=products[0].id,
                order_qty=2,
                unit_price=Decimal("3399.99"),
            ),
            SalesOrderDetail(
                sales_order_id=71776,
                product_id=products[1].id,
                order_qty=4,
                unit_price=Decimal("34.99"),
            ),
        ]
        db.add_all(order_lines)
        db.commit()
        logger.info("Seed data created.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
