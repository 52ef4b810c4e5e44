# backend/schemas/product.py
from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Any, Dict


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CategoryOption(ORMBase):
    id: int
    name: str


# Stored product as returned by create/update/show
class ProductResponse(ORMBase):
    id: int
    category_id: Optional[int] = None
    category: Optional[CategoryOption] = None
    name: str
    price_buy: float
    price_sell: float
    stock: float
    image_path: Optional[str] = None
    image_url: Optional[str] = None


# Header of one list column
class ColumnOut(BaseModel):
    name: str
    label: str
    type: str
    orderable: bool
    searchable: bool
    decimals: Optional[int] = None
    dec_point: Optional[str] = None
    thousands_sep: Optional[str] = None
    prefix: Optional[str] = None


# Paginated, rendered product table
class ProductListPage(BaseModel):
    columns: List[ColumnOut]
    # One dict per row: column name -> rendered cell, plus "id"
    items: List[Dict[str, Any]]
    total: int
    page: int
    page_size: int
    search: Optional[str] = None


class FieldOut(BaseModel):
    name: str
    label: str
    type: str
    attribute: str
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    options: Optional[List[CategoryOption]] = None
    upload: Optional[Dict[str, str]] = None


# Create / edit form definition
class ProductForm(BaseModel):
    entity: str
    action: str
    fields: List[FieldOut]
    # Current values, only on the edit form
    values: Optional[Dict[str, Any]] = None
