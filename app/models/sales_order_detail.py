from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric

from app.database.base import Base


class SalesOrderDetail(Base):
    __tablename__ = "sales_order_details"

    id = Column(Integer, primary_key=True)
    sales_order_id = Column(Integer, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    order_qty = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)
    unit_price_discount = Column(Numeric(10, 2), nullable=False, default=0)

    modified_date = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_sales_order_details_product", "product_id"),
    )


__all__ = ["SalesOrderDetail"]
