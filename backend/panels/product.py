# backend/panels/product.py
"""Product admin panel: list columns, search predicates and form fields."""
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import String, cast
from sqlalchemy.orm import Session

from config import settings
from models.category import Category
from models.product import Product
from panels.base import LIKE_ESCAPE, ColumnSpec, FieldSpec, NumberFormat, UploadSpec, contains_pattern

ENTITY_NAME = "product"
ENTITY_NAME_PLURAL = "products"

IMAGE_DISK = "public"
IMAGE_PATH = "products"


# ---- SEARCH PREDICATES ----
# Each takes the search term and returns a WHERE clause for that column.
# The list route ORs them together.

def category_name_contains(term: str):
    return Product.category.has(Category.name.ilike(contains_pattern(term), escape=LIKE_ESCAPE))

def name_contains(term: str):
    return Product.name.ilike(contains_pattern(term), escape=LIKE_ESCAPE)

def price_buy_contains(term: str):
    return cast(Product.price_buy, String).like(contains_pattern(term), escape=LIKE_ESCAPE)

def price_sell_contains(term: str):
    return cast(Product.price_sell, String).like(contains_pattern(term), escape=LIKE_ESCAPE)

def stock_contains(term: str):
    return cast(Product.stock, String).like(contains_pattern(term), escape=LIKE_ESCAPE)


def _image_path(entry):
    return entry.image_path


def _category_name(entry):
    return entry.category.name if entry.category is not None else None


def money_format() -> NumberFormat:
    return NumberFormat(
        decimals=0,
        dec_point=settings.NUMBER_DEC_POINT,
        thousands_sep=settings.NUMBER_THOUSANDS_SEP,
    )


def list_columns() -> Tuple[ColumnSpec, ...]:
    money = money_format()
    currency = settings.CURRENCY_PREFIX
    return (
        ColumnSpec(name="row_number", label="#", type="row_number"),
        ColumnSpec(
            name="category.name",
            label="Product Category",
            type="select",
            value=_category_name,
            search=category_name_contains,
            order=Category.name,
        ),
        ColumnSpec(name="name", label="Product Name", type="text",
                   search=name_contains, order=Product.name),
        ColumnSpec(name="price_buy", label=f"Buy Price ({currency})", type="number",
                   search=price_buy_contains, order=Product.price_buy, number_format=money),
        ColumnSpec(name="price_sell", label=f"Sell Price ({currency})", type="number",
                   search=price_sell_contains, order=Product.price_sell, number_format=money),
        ColumnSpec(name="stock", label="Stock", type="number",
                   search=stock_contains, order=Product.stock, number_format=NumberFormat()),
        ColumnSpec(
            name="image",
            label="Image",
            type="image",
            value=_image_path,
            prefix=settings.STORAGE_URL_PREFIX,
        ),
    )


def category_options(db: Session) -> List[dict]:
    categories = db.query(Category).order_by(Category.name.asc()).all()
    return [{"id": c.id, "name": c.name} for c in categories]


def form_fields() -> Tuple[FieldSpec, ...]:
    """Fields of the create form. The update form uses the same tuple."""
    return (
        FieldSpec(name="category", label="Product Category", type="select",
                  attribute="category_id", options=category_options),
        FieldSpec(name="name", label="Product Name", type="text"),
        FieldSpec(name="price_buy", label="Buy Price", type="number",
                  prefix=settings.CURRENCY_PREFIX, suffix=".00"),
        FieldSpec(name="stock", label="Stock", type="number"),
        FieldSpec(name="image", label="Image", type="upload", attribute="image_path",
                  upload=UploadSpec(disk=IMAGE_DISK, path=IMAGE_PATH)),
    )


def _decimal_text(value) -> Optional[str]:
    # Exact column value, two decimal places
    if value is None:
        return None
    return str(Decimal(str(value)).quantize(Decimal("0.01")))


def form_values(entry: Product) -> dict:
    return {
        "category": entry.category_id,
        "name": entry.name,
        "price_buy": _decimal_text(entry.price_buy),
        "stock": _decimal_text(entry.stock),
        "image": entry.image_path,
    }
