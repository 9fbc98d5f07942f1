from sqlalchemy import Column, Integer, String

from app.database.base import Base


class ProductModel(Base):
    __tablename__ = "product_models"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)


__all__ = ["ProductModel"]
