from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


class ProductForm(BaseModel):
    """Editable product fields as submitted by the create/edit forms."""

    name: Optional[str] = Field(None, max_length=50)
    product_number: Optional[str] = Field(None, max_length=25)
    list_price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    size: Optional[str] = Field(None, max_length=5)
    color: Optional[str] = Field(None, max_length=15)
    standard_cost: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    weight: Optional[Decimal] = Field(None, ge=0, max_digits=8, decimal_places=2)
    product_category_id: Optional[int] = None
    product_model_id: Optional[int] = None
    sell_end_date: Optional[datetime] = None
    discontinued_date: Optional[datetime] = None

    @field_validator(
        "name",
        "product_number",
        "size",
        "color",
        "standard_cost",
        "weight",
        "product_category_id",
        "product_model_id",
        "sell_end_date",
        "discontinued_date",
        mode="before",
    )
    @classmethod
    def _empty_strings_are_missing(cls, value):
        return _blank_to_none(value)

    @field_validator("list_price", mode="before")
    @classmethod
    def _empty_price_is_zero(cls, value):
        value = _blank_to_none(value)
        return Decimal("0") if value is None else value


class ProductView(BaseModel):
    """Read-only projection of a product for the table, detail and edit pages."""

    model_config = ConfigDict(frozen=True)

    product_id: int
    name: str
    product_number: Optional[str] = None
    list_price: Decimal
    size: Optional[str] = None
    color: Optional[str] = None
    product_category_id: Optional[int] = None
    category_name: str = ""
    product_model_id: Optional[int] = None
    product_model_name: Optional[str] = None
    number_of_orders: int = 0
    thumbnail_photo_file_name: Optional[str] = None
    sell_start_date: Optional[datetime] = None
    sell_end_date: Optional[datetime] = None
    discontinued_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None


class CatalogOption(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


__all__ = ["CatalogOption", "ProductForm", "ProductView"]
