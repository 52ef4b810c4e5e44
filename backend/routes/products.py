# backend/routes/products.py
from typing import Literal, Optional
from fastapi import (
    APIRouter, Depends, HTTPException, Query, Request,
    UploadFile, File, Form, status
)
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from utils.tokenJWT import get_current_admin
from utils.audit import write_log
from utils.storage import PublicStorage, get_storage
from utils.validation import ProductValidationError
from utils import product_pipeline
from models.users import User
from models.category import Category
from models.product import Product
from panels import product as panel
from panels.base import search_clause
import schemas.product as product_schemas

router = APIRouter(
    prefix=f"/{settings.ADMIN_ROUTE_PREFIX.strip('/')}/{panel.ENTITY_NAME}",
    tags=["Products"],
)

# ---- HELPERS ----
def _ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None

def _get_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

def _serialize(product: Product, storage: PublicStorage) -> product_schemas.ProductResponse:
    out = product_schemas.ProductResponse.model_validate(product)
    out.image_url = storage.url(product.image_path)
    return out

def _invalid(exc: ProductValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=exc.as_detail())

def _form(category, name, price_buy, stock) -> dict:
    return {"category": category, "name": name, "price_buy": price_buy, "stock": stock}


# =========================
# LIST
# =========================
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    request: Request,
    search: Optional[str] = Query(None, description="Matches any searchable column"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    order_by: Optional[str] = Query(None, description="Name of an orderable column"),
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    columns = panel.list_columns()
    query = db.query(Product)

    term = (search or "").strip()
    if term:
        query = query.filter(search_clause(columns, term))

    sortable = {col.name: col.order for col in columns if col.orderable}
    if order_by is not None and order_by not in sortable:
        raise HTTPException(status_code=400, detail=f"Column '{order_by}' is not orderable")
    if order_by:
        sort_col = sortable[order_by]
        if order_by == "category.name":
            query = query.outerjoin(Category, Product.category_id == Category.id)
        query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc(), Product.id.desc())
    else:
        query = query.order_by(Product.id.desc())

    total = query.count()
    offset = (page - 1) * page_size
    entries = query.offset(offset).limit(page_size).all()

    rows = []
    for index, entry in enumerate(entries, start=offset + 1):
        row = {"id": entry.id}
        row.update({col.name: col.render(entry, index) for col in columns})
        rows.append(row)

    write_log(
        db, user_id=current_user.id, action="PRODUCTS_LIST", resource="products",
        status="SUCCESS", ip=_ip(request),
        meta={"page": page, "returned": len(entries), "search": term or None},
    )

    return {
        "columns": [col.describe() for col in columns],
        "items": rows,
        "total": total,
        "page": page,
        "page_size": page_size,
        "search": term or None,
    }


# =========================
# CREATE FORM
# =========================
@router.get("/create", response_model=product_schemas.ProductForm)
def create_form(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    return {
        "entity": panel.ENTITY_NAME,
        "action": "create",
        "fields": [f.describe(db) for f in panel.form_fields()],
    }


# =========================
# CREATE
# =========================
@router.post("", response_model=product_schemas.ProductResponse, status_code=status.HTTP_201_CREATED)
def add_product(
    request: Request,
    db: Session = Depends(get_db),
    storage: PublicStorage = Depends(get_storage),
    current_user: User = Depends(get_current_admin),
    # Every field is optional here: the validator reports all missing ones at once
    category: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    price_buy: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    try:
        product = product_pipeline.create_product(db, storage, _form(category, name, price_buy, stock), image)
    except ProductValidationError as exc:
        write_log(
            db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
            status="FAIL", ip=_ip(request), meta={"fields": sorted(exc.errors)},
        )
        raise _invalid(exc)
    finally:
        if image is not None:
            image.file.close()

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=_ip(request), meta={"id": product.id, "name": product.name},
    )
    return _serialize(product, storage)


# =========================
# SHOW
# =========================
@router.get("/{product_id}", response_model=product_schemas.ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    storage: PublicStorage = Depends(get_storage),
    current_user: User = Depends(get_current_admin),
):
    return _serialize(_get_or_404(db, product_id), storage)


# =========================
# EDIT FORM
# =========================
@router.get("/{product_id}/edit", response_model=product_schemas.ProductForm)
def edit_form(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    product = _get_or_404(db, product_id)
    # Update reuses the create field set unchanged
    return {
        "entity": panel.ENTITY_NAME,
        "action": "update",
        "fields": [f.describe(db) for f in panel.form_fields()],
        "values": panel.form_values(product),
    }


# =========================
# UPDATE
# =========================
@router.put("/{product_id}", response_model=product_schemas.ProductResponse)
def update_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    storage: PublicStorage = Depends(get_storage),
    current_user: User = Depends(get_current_admin),
    category: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    price_buy: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    product = _get_or_404(db, product_id)
    try:
        product = product_pipeline.update_product(
            db, storage, product, _form(category, name, price_buy, stock), image
        )
    except ProductValidationError as exc:
        write_log(
            db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
            status="FAIL", ip=_ip(request), meta={"id": product_id, "fields": sorted(exc.errors)},
        )
        raise _invalid(exc)
    finally:
        if image is not None:
            image.file.close()

    write_log(
        db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
        status="SUCCESS", ip=_ip(request), meta={"id": product.id},
    )
    return _serialize(product, storage)


# =========================
# DELETE
# =========================
@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    storage: PublicStorage = Depends(get_storage),
    current_user: User = Depends(get_current_admin),
):
    product = _get_or_404(db, product_id)
    pname = product.name
    product_pipeline.delete_product(db, storage, product)
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              status="SUCCESS", ip=_ip(request), meta={"id": product_id})
    return {"detail": f"Product '{pname}' deleted"}
