from sqlalchemy import Column, Integer, String

from app.database.base import Base


class ProductCategory(Base):
    __tablename__ = "product_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)


__all__ = ["ProductCategory"]
