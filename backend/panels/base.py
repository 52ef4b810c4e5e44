# backend/panels/base.py
"""Building blocks of the admin panel descriptors.

A panel is declared as plain data: an ordered tuple of ``ColumnSpec`` for the
list and an ordered tuple of ``FieldSpec`` for the create/update form. The
routes render them; nothing here keeps state between renders.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement

# term -> SQL boolean clause matching the rows the column considers a hit
SearchPredicate = Callable[[str], ColumnElement]

# Escape character for LIKE patterns built by contains_pattern
LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """LIKE pattern matching ``term`` literally anywhere in the value."""
    for char in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, LIKE_ESCAPE + char)
    return f"%{term}%"


@dataclass(frozen=True)
class NumberFormat:
    decimals: int = 0
    dec_point: str = "."
    thousands_sep: str = ","


def format_number(value, fmt: NumberFormat = NumberFormat()) -> Optional[str]:
    """Format ``value`` like a spreadsheet number cell.

    >>> format_number(1500000, NumberFormat(dec_point=",", thousands_sep="."))
    '1.500.000'
    """
    if value is None:
        return None
    exp = Decimal(1).scaleb(-fmt.decimals)
    rounded = Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{fmt.decimals}f}"
    return text.replace(",", "\0").replace(".", fmt.dec_point).replace("\0", fmt.thousands_sep)


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    label: str
    type: str
    # entry -> raw value shown in the cell
    value: Optional[Callable[[Any], Any]] = None
    search: Optional[SearchPredicate] = None
    # expression used for ORDER BY; None means not orderable
    order: Optional[ColumnElement] = None
    number_format: Optional[NumberFormat] = None
    prefix: str = ""

    @property
    def orderable(self) -> bool:
        return self.order is not None

    @property
    def searchable(self) -> bool:
        return self.search is not None

    def describe(self) -> dict:
        out = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "orderable": self.orderable,
            "searchable": self.searchable,
        }
        if self.number_format is not None:
            out.update(
                decimals=self.number_format.decimals,
                dec_point=self.number_format.dec_point,
                thousands_sep=self.number_format.thousands_sep,
            )
        if self.prefix:
            out["prefix"] = self.prefix
        return out

    def render(self, entry, row_number: int):
        if self.type == "row_number":
            return row_number
        raw = self.value(entry) if self.value else getattr(entry, self.name, None)
        if self.type == "number":
            return format_number(raw, self.number_format or NumberFormat())
        if self.type == "image":
            return f"{self.prefix}{raw}" if raw else None
        return raw


@dataclass(frozen=True)
class UploadSpec:
    disk: str
    path: str
    visibility: str = "public"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    type: str
    # attribute the field writes on the entry
    attribute: Optional[str] = None
    options: Optional[Callable[[Session], List[dict]]] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    upload: Optional[UploadSpec] = None

    def describe(self, db: Optional[Session] = None) -> dict:
        out = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "attribute": self.attribute or self.name,
        }
        if self.prefix is not None:
            out["prefix"] = self.prefix
        if self.suffix is not None:
            out["suffix"] = self.suffix
        if self.options is not None and db is not None:
            out["options"] = self.options(db)
        if self.upload is not None:
            out["upload"] = {
                "disk": self.upload.disk,
                "path": self.upload.path,
                "visibility": self.upload.visibility,
            }
        return out


def search_clause(columns: Tuple[ColumnSpec, ...], term: str):
    """OR of every searchable column's predicate, or None when nothing searches."""
    clauses = [col.search(term) for col in columns if col.searchable]
    return or_(*clauses) if clauses else None
