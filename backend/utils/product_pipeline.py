# utils/product_pipeline.py
"""Save path of the product panel: validate -> price -> persist -> store image."""
import logging
from typing import Mapping, Optional

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.product import Product
from panels.product import IMAGE_PATH
from utils.pricing import apply_pricing
from utils.storage import PublicStorage
from utils.validation import (
    ErrorCode,
    FieldError,
    ProductValidationError,
    ValidatedProduct,
    validate_product,
)

logger = logging.getLogger(__name__)


def _name_conflict() -> ProductValidationError:
    return ProductValidationError(
        {"name": [FieldError(ErrorCode.UNIQUE, "The name has already been taken.")]}
    )


def _save(db: Session, storage: PublicStorage, product: Product, data: ValidatedProduct) -> Product:
    product.category_id = data.category_id
    product.name = data.name
    product.price_buy = data.price_buy
    product.stock = data.stock

    apply_pricing(product)

    # Persist first: a unique index hit must not leave an orphaned file behind
    try:
        db.add(product)
        db.flush()
    except IntegrityError:
        db.rollback()
        raise _name_conflict()

    old_image = product.image_path
    new_image = None
    if data.image is not None:
        new_image = storage.store(data.image, visibility="public", path=IMAGE_PATH, extension=data.image_extension)
        product.image_path = new_image

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        storage.delete(new_image)
        raise _name_conflict()
    except Exception:
        db.rollback()
        storage.delete(new_image)
        raise

    # Replaced image is removed only once the new one is committed
    if new_image and old_image and old_image != new_image:
        storage.delete(old_image)

    db.refresh(product)
    return product


def create_product(
    db: Session,
    storage: PublicStorage,
    form: Mapping[str, object],
    image: Optional[UploadFile],
) -> Product:
    data = validate_product(db, form, image)
    product = _save(db, storage, Product(), data)
    logger.info("Product %s created (price_sell=%s)", product.id, product.price_sell)
    return product


def update_product(
    db: Session,
    storage: PublicStorage,
    product: Product,
    form: Mapping[str, object],
    image: Optional[UploadFile],
) -> Product:
    data = validate_product(db, form, image, current_id=product.id)
    product = _save(db, storage, product, data)
    logger.info("Product %s updated (price_sell=%s)", product.id, product.price_sell)
    return product


def delete_product(db: Session, storage: PublicStorage, product: Product) -> None:
    pid, image = product.id, product.image_path
    db.delete(product)
    db.commit()
    storage.delete(image)
    logger.info("Product %s deleted", pid)
