# utils/validation.py
"""Validation rules for product form submissions.

Every rule runs and every failing field is reported; nothing here writes to
the database or the disk. Authorization is checked earlier, by the
``get_current_admin`` dependency of the product routes.
"""
import enum
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, List, Mapping, Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

from models.category import Category
from models.product import Product

# Pillow format name -> stored file extension
ALLOWED_IMAGE_FORMATS = {"JPEG": "jpg", "PNG": "png"}
ALLOWED_IMAGE_MIMES = ("jpeg", "png", "jpg")
MAX_IMAGE_KILOBYTES = 100

# Product.price_buy / stock are Numeric(12, 2)
NUMERIC_SCALE = Decimal("0.01")
MAX_NUMERIC = Decimal("9999999999.99")


class ErrorCode(str, enum.Enum):
    REQUIRED = "RequiredFieldMissing"
    TYPE_MISMATCH = "TypeMismatch"
    UNIQUE = "UniquenessViolation"
    MEDIA_TYPE = "UnsupportedMediaType"
    TOO_LARGE = "FileTooLarge"
    INVALID_REFERENCE = "InvalidReference"


@dataclass
class FieldError:
    code: ErrorCode
    message: str

    def as_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}


class ProductValidationError(Exception):
    """Raised with the complete field -> errors map of a rejected submission."""

    def __init__(self, errors: Dict[str, List[FieldError]]):
        super().__init__("The given data was invalid.")
        self.errors = errors

    def codes(self, field_name: str) -> List[ErrorCode]:
        return [e.code for e in self.errors.get(field_name, [])]

    def as_detail(self) -> dict:
        return {
            "message": str(self),
            "errors": {name: [e.as_dict() for e in errs] for name, errs in self.errors.items()},
        }


@dataclass
class ValidatedProduct:
    name: str
    price_buy: Decimal
    stock: Decimal
    category_id: Optional[int] = None
    image: Optional[UploadFile] = None
    # Extension matching the detected image format
    image_extension: Optional[str] = None


@dataclass
class _Collector:
    errors: Dict[str, List[FieldError]] = field(default_factory=dict)

    def add(self, name: str, code: ErrorCode, message: str) -> None:
        self.errors.setdefault(name, []).append(FieldError(code, message))


def _label(name: str) -> str:
    return name.replace("_", " ")


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _numeric(value) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _fit_column(number: Decimal) -> Optional[Decimal]:
    """Round to the column scale; None when the value overflows its precision."""
    if abs(number) > MAX_NUMERIC:
        return None
    rounded = number.quantize(NUMERIC_SCALE, rounding=ROUND_HALF_UP)
    return rounded if abs(rounded) <= MAX_NUMERIC else None


def _upload_size(upload: UploadFile) -> int:
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def _image_format(upload: UploadFile) -> Optional[str]:
    upload.file.seek(0)
    try:
        with Image.open(upload.file) as img:
            return img.format
    except (UnidentifiedImageError, OSError):
        return None
    finally:
        upload.file.seek(0)


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


def name_taken(db: Session, name: str, ignore_id: Optional[int] = None) -> bool:
    query = db.query(Product.id).filter(Product.name == name)
    if ignore_id is not None:
        query = query.filter(Product.id != ignore_id)
    return query.first() is not None


def validate_product(
    db: Session,
    form: Mapping[str, object],
    image: Optional[UploadFile] = None,
    current_id: Optional[int] = None,
) -> ValidatedProduct:
    """Validate a create (``current_id is None``) or update submission.

    Returns the cleaned values or raises ``ProductValidationError`` listing
    every failing field.
    """
    c = _Collector()

    name = form.get("name")
    if _blank(name):
        c.add("name", ErrorCode.REQUIRED, "The name field is required.")
    else:
        name = str(name).strip()
        if name_taken(db, name, ignore_id=current_id):
            c.add("name", ErrorCode.UNIQUE, "The name has already been taken.")

    numbers = {}
    for key in ("price_buy", "stock"):
        raw = form.get(key)
        if _blank(raw):
            c.add(key, ErrorCode.REQUIRED, f"The {_label(key)} field is required.")
            continue
        number = _numeric(raw)
        if number is None:
            c.add(key, ErrorCode.TYPE_MISMATCH, f"The {_label(key)} must be a number.")
            continue
        number = _fit_column(number)
        if number is None:
            c.add(key, ErrorCode.TYPE_MISMATCH,
                  f"The {_label(key)} must be between -{MAX_NUMERIC} and {MAX_NUMERIC}.")
        else:
            numbers[key] = number

    category_id = None
    raw_category = form.get("category")
    if not _blank(raw_category):
        try:
            category_id = int(str(raw_category).strip())
        except ValueError:
            c.add("category", ErrorCode.TYPE_MISMATCH, "The category must be an integer.")
        else:
            if db.get(Category, category_id) is None:
                c.add("category", ErrorCode.INVALID_REFERENCE, "The selected category is invalid.")
                category_id = None

    extension = None
    if not _has_file(image):
        # Updates keep the stored image when no new file is sent
        if current_id is None:
            c.add("image", ErrorCode.REQUIRED, "The image field is required.")
        image = None
    else:
        fmt = _image_format(image)
        if fmt not in ALLOWED_IMAGE_FORMATS:
            c.add("image", ErrorCode.MEDIA_TYPE,
                  f"The image must be a file of type: {', '.join(ALLOWED_IMAGE_MIMES)}.")
        else:
            extension = ALLOWED_IMAGE_FORMATS[fmt]
        if _upload_size(image) > MAX_IMAGE_KILOBYTES * 1024:
            c.add("image", ErrorCode.TOO_LARGE,
                  f"The image must not be greater than {MAX_IMAGE_KILOBYTES} kilobytes.")

    if c.errors:
        raise ProductValidationError(c.errors)

    return ValidatedProduct(
        name=name,
        price_buy=numbers["price_buy"],
        stock=numbers["stock"],
        category_id=category_id,
        image=image,
        image_extension=extension,
    )
