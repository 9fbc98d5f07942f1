import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.config import Settings, get_settings
from app.core.constants import DELETE_BLOCKED_MESSAGE, PRODUCT_NUMBER_FALLBACK_FORMAT
from app.core.errors import (
    ProductDeleteConflictError,
    ProductNotFoundError,
    ProductValidationError,
)
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.product_model import ProductModel
from app.models.sales_order_detail import SalesOrderDetail
from app.schemas.product import CatalogOption, ProductForm, ProductView
from app.services.photo_storage import PhotoStorage, PhotoUpload

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_product_number(now: Optional[datetime] = None) -> str:
    return (now or _utcnow()).strftime(PRODUCT_NUMBER_FALLBACK_FORMAT)


def _money(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(_CENTS)


def build_product_form(values: Mapping[str, Any]) -> ProductForm:
    """Validate raw form input, keeping it around for re-display on failure."""
    try:
        return ProductForm.model_validate(dict(values))
    except ValidationError as exc:
        errors = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error.get("loc") else "__all__"
            errors.setdefault(field, error["msg"])
        raise ProductValidationError(errors, values=values) from exc


def to_view(product: Product, number_of_orders: int = 0) -> ProductView:
    category = product.category
    product_model = product.product_model
    return ProductView(
        product_id=product.id,
        name=product.name,
        product_number=product.product_number,
        list_price=product.list_price,
        size=product.size,
        color=product.color,
        product_category_id=product.product_category_id,
        category_name=category.name if category is not None else "",
        product_model_id=product.product_model_id,
        product_model_name=product_model.name if product_model is not None else None,
        number_of_orders=number_of_orders,
        thumbnail_photo_file_name=product.thumbnail_photo_file_name,
        sell_start_date=product.sell_start_date,
        sell_end_date=product.sell_end_date,
        discontinued_date=product.discontinued_date,
        modified_date=product.modified_date,
    )


def list_products(db: Session) -> list[ProductView]:
    """Every product with a resolvable category, with its order-line count."""
    order_counts = (
        select(
            SalesOrderDetail.product_id.label("product_id"),
            func.count(SalesOrderDetail.id).label("order_count"),
        )
        .group_by(SalesOrderDetail.product_id)
        .subquery()
    )
    rows = db.execute(
        select(
            Product.id,
            Product.name,
            Product.product_number,
            Product.list_price,
            Product.size,
            Product.thumbnail_photo_file_name,
            ProductCategory.id.label("category_id"),
            ProductCategory.name.label("category_name"),
            func.coalesce(order_counts.c.order_count, 0).label("order_count"),
        )
        .join(ProductCategory, Product.product_category_id == ProductCategory.id)
        .outerjoin(order_counts, order_counts.c.product_id == Product.id)
        .order_by(Product.id)
    ).all()

    return [
        ProductView(
            product_id=row.id,
            name=row.name,
            product_number=row.product_number,
            list_price=row.list_price,
            size=row.size,
            thumbnail_photo_file_name=row.thumbnail_photo_file_name,
            product_category_id=row.category_id,
            category_name=row.category_name,
            number_of_orders=int(row.order_count),
        )
        for row in rows
    ]


def count_orders(db: Session, product_id: int) -> int:
    count = db.scalar(
        select(func.count(SalesOrderDetail.id)).where(
            SalesOrderDetail.product_id == product_id
        )
    )
    return int(count or 0)


def product_exists(db: Session, product_id: int) -> bool:
    return db.scalar(select(Product.id).where(Product.id == product_id)) is not None


def _find_product(db: Session, product_id: int) -> Optional[Product]:
    return (
        db.execute(select(Product).where(Product.id == product_id))
        .scalars()
        .first()
    )


def get_product(db: Session, product_id: int) -> Product:
    product = _find_product(db, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def get_product_view(
    db: Session,
    product_id: int,
    *,
    with_order_count: bool = False,
) -> ProductView:
    product = get_product(db, product_id)
    orders = count_orders(db, product.id) if with_order_count else 0
    return to_view(product, orders)


def list_categories(db: Session) -> list[CatalogOption]:
    rows = db.execute(select(ProductCategory).order_by(ProductCategory.name)).scalars()
    return [CatalogOption.model_validate(row) for row in rows]


def list_model_options(db: Session) -> list[CatalogOption]:
    rows = db.execute(select(ProductModel).order_by(ProductModel.name)).scalars()
    return [CatalogOption.model_validate(row) for row in rows]


def _reference_errors(
    db: Session,
    form: ProductForm,
    product_number: str,
    *,
    product_id: Optional[int] = None,
) -> dict[str, str]:
    errors = {}
    if form.product_category_id is not None and db.get(ProductCategory, form.product_category_id) is None:
        errors["product_category_id"] = "Unknown product category."
    if form.product_model_id is not None and db.get(ProductModel, form.product_model_id) is None:
        errors["product_model_id"] = "Unknown product model."

    duplicate = select(Product.id).where(Product.product_number == product_number)
    if product_id is not None:
        duplicate = duplicate.where(Product.id != product_id)
    if db.scalar(duplicate) is not None:
        errors["product_number"] = f"Product number {product_number} is already in use."
    return errors


def _apply_form(product: Product, form: ProductForm, name: str, product_number: str) -> None:
    product.name = name
    product.product_number = product_number
    product.list_price = _money(form.list_price)
    product.size = form.size
    product.color = form.color
    product.standard_cost = _money(form.standard_cost)
    product.weight = form.weight
    product.product_category_id = form.product_category_id
    product.product_model_id = form.product_model_id
    product.sell_end_date = form.sell_end_date
    product.discontinued_date = form.discontinued_date


def create_product(
    db: Session,
    form: ProductForm,
    photo: Optional[PhotoUpload] = None,
    *,
    storage: PhotoStorage,
    settings: Optional[Settings] = None,
) -> Product:
    settings = settings or get_settings()
    now = _utcnow()
    name = form.name or settings.DEFAULT_PRODUCT_NAME
    product_number = form.product_number or generate_product_number(now)

    errors = _reference_errors(db, form, product_number)
    if photo is not None:
        errors.update(storage.check(photo))
    if errors:
        raise ProductValidationError(errors, values=form.model_dump())

    product = Product(sell_start_date=now, modified_date=now)
    _apply_form(product, form, name, product_number)

    file_name = None
    if photo is not None:
        file_name = storage.save(photo)
    product.thumbnail_photo_file_name = file_name

    db.add(product)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        storage.delete(file_name)
        raise
    db.refresh(product)

    logger.info(
        "Created product %s (%s)",
        product.id,
        product.product_number,
        extra={"product_id": product.id},
    )
    return product


def update_product(
    db: Session,
    product_id: int,
    form: ProductForm,
    photo: Optional[PhotoUpload] = None,
    *,
    storage: PhotoStorage,
    settings: Optional[Settings] = None,
) -> Product:
    settings = settings or get_settings()
    product = get_product(db, product_id)

    now = _utcnow()
    name = form.name or settings.DEFAULT_PRODUCT_NAME
    product_number = form.product_number or generate_product_number(now)

    errors = _reference_errors(db, form, product_number, product_id=product.id)
    if photo is not None:
        errors.update(storage.check(photo))
    if errors:
        raise ProductValidationError(errors, values=form.model_dump())

    _apply_form(product, form, name, product_number)

    # The old file is only removed once the new name is committed.
    old_file_name = product.thumbnail_photo_file_name
    new_file_name = None
    if photo is not None:
        new_file_name = storage.save(photo)
        product.thumbnail_photo_file_name = new_file_name

    product.modified_date = now
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        storage.delete(new_file_name)
        if isinstance(exc, StaleDataError) and not product_exists(db, product_id):
            raise ProductNotFoundError(product_id) from None
        raise
    db.refresh(product)

    if new_file_name is not None:
        storage.delete(old_file_name)

    logger.info("Updated product %s", product_id, extra={"product_id": product_id})
    return product


def prepare_delete(db: Session, product_id: int) -> ProductView:
    """Product view for the delete confirmation page, unless orders still reference it."""
    product = get_product(db, product_id)
    orders = count_orders(db, product.id)
    if orders > 0:
        logger.warning(
            "Delete of product %s blocked by %d order lines",
            product.id,
            orders,
            extra={"product_id": product.id},
        )
        raise ProductDeleteConflictError(
            product.id,
            DELETE_BLOCKED_MESSAGE.format(name=product.name),
            orders,
        )
    return to_view(product, orders)


def delete_product(
    db: Session,
    product_id: int,
    *,
    storage: Optional[PhotoStorage] = None,
    settings: Optional[Settings] = None,
) -> bool:
    """Remove the product. Returns False when it was already gone."""
    settings = settings or get_settings()
    product = _find_product(db, product_id)
    if product is None:
        logger.info("Product %s already deleted", product_id, extra={"product_id": product_id})
        return False

    orders = count_orders(db, product.id)
    if orders > 0:
        raise ProductDeleteConflictError(
            product.id,
            DELETE_BLOCKED_MESSAGE.format(name=product.name),
            orders,
        )

    file_name = product.thumbnail_photo_file_name
    db.delete(product)
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        if not product_exists(db, product_id):
            return False
        raise

    if storage is not None and settings.PHOTO_CLEANUP_ON_DELETE:
        storage.delete(file_name)

    logger.info("Deleted product %s", product_id, extra={"product_id": product_id})
    return True


__all__ = [
    "build_product_form",
    "count_orders",
    "create_product",
    "delete_product",
    "generate_product_number",
    "get_product",
    "get_product_view",
    "list_categories",
    "list_model_options",
    "list_products",
    "prepare_delete",
    "product_exists",
    "to_view",
    "update_product",
]
