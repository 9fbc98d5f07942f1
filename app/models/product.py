import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.database.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)

    name = Column(String(50), nullable=False)
    product_number = Column(String(25), nullable=False, unique=True)
    color = Column(String(15))
    standard_cost = Column(Numeric(10, 2))
    list_price = Column(Numeric(10, 2), nullable=False, default=0)
    size = Column(String(5))
    weight = Column(Numeric(8, 2))

    product_category_id = Column(Integer, ForeignKey("product_categories.id"))
    product_model_id = Column(Integer, ForeignKey("product_models.id"))

    sell_start_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    sell_end_date = Column(DateTime(timezone=True))
    discontinued_date = Column(DateTime(timezone=True))

    thumbnail_photo_file_name = Column(String(255))
    rowguid = Column(String(36), nullable=False, default=lambda: str(uuid.uuid4()))
    modified_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Bumped on every flush; a stale UPDATE/DELETE raises StaleDataError.
    version_id = Column(Integer, nullable=False)

    category = relationship("ProductCategory", lazy="joined")
    product_model = relationship("ProductModel", lazy="joined")

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("idx_products_category", "product_category_id"),
        Index("idx_products_model", "product_model_id"),
    )


__all__ = ["Product"]
