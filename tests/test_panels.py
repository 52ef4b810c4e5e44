"""Tests for the product list columns, search predicates and form fields."""

from decimal import Decimal

import pytest

from conftest import make_product
from models.product import Product
from panels import product as panel
from panels.base import ColumnSpec, NumberFormat, contains_pattern, format_number, search_clause


class TestFormatNumber:
    @pytest.mark.parametrize(
        "value,fmt,expected",
        [
            (1500000, NumberFormat(dec_point=",", thousands_sep="."), "1.500.000"),
            (Decimal("1234.50"), NumberFormat(dec_point=",", thousands_sep="."), "1.235"),
            (Decimal("1234.5"), NumberFormat(decimals=2, dec_point=",", thousands_sep="."), "1.234,50"),
            (1500, NumberFormat(), "1,500"),
            (Decimal("-2500.4"), NumberFormat(), "-2,500"),
            (0, NumberFormat(), "0"),
        ],
    )
    def test_formats(self, value, fmt, expected):
        assert format_number(value, fmt) == expected

    def test_none_stays_none(self):
        assert format_number(None) is None


class TestListColumns:
    def test_display_order(self):
        names = [col.name for col in panel.list_columns()]
        assert names == ["row_number", "category.name", "name", "price_buy", "price_sell", "stock", "image"]

    def test_rendering_twice_gives_the_same_definition(self):
        first, second = panel.list_columns(), panel.list_columns()
        assert first == second
        assert [c.describe() for c in first] == [c.describe() for c in second]

    def test_row_number_and_image_are_not_orderable(self):
        columns = {col.name: col for col in panel.list_columns()}
        assert not columns["row_number"].orderable
        assert not columns["image"].orderable
        assert columns["name"].orderable

    def test_money_columns_use_configured_separators(self):
        columns = {col.name: col.describe() for col in panel.list_columns()}
        for name in ("price_buy", "price_sell"):
            assert columns[name]["dec_point"] == ","
            assert columns[name]["thousands_sep"] == "."
            assert columns[name]["decimals"] == 0
        assert columns["stock"]["thousands_sep"] == ","

    def test_every_data_column_except_image_is_searchable(self):
        searchable = [col.name for col in panel.list_columns() if col.searchable]
        assert searchable == ["category.name", "name", "price_buy", "price_sell", "stock"]


class TestColumnRendering:
    def _columns(self):
        return {col.name: col for col in panel.list_columns()}

    def test_row_values(self, db, categories):
        product = make_product(
            db, "Widget", price_buy=1500000, stock=2500,
            category=categories["Beverages"], image_path="products/w.jpg",
        )
        columns = self._columns()

        assert columns["row_number"].render(product, 11) == 11
        assert columns["category.name"].render(product, 1) == "Beverages"
        assert columns["name"].render(product, 1) == "Widget"
        assert columns["price_buy"].render(product, 1) == "1.500.000"
        assert columns["price_sell"].render(product, 1) == "450.000"
        assert columns["stock"].render(product, 1) == "2,500"
        assert columns["image"].render(product, 1) == "storage/products/w.jpg"

    def test_missing_category_and_image(self, db):
        product = make_product(db, "Loose")
        columns = self._columns()
        assert columns["category.name"].render(product, 1) is None
        assert columns["image"].render(product, 1) is None

    def test_text_column_falls_back_to_attribute(self, db):
        product = make_product(db, "Widget")
        assert ColumnSpec(name="name", label="Name", type="text").render(product, 1) == "Widget"


class TestSearchPredicates:
    @pytest.fixture
    def catalog(self, db, categories):
        return {
            "gadget": make_product(db, "Gadget", price_buy=1500, stock=7, category=categories["Widgets-Category"]),
            "tea": make_product(db, "Green Tea", price_buy=20, stock=300, category=categories["Beverages"]),
            "shirt": make_product(db, "Shirt", price_buy=80, stock=12, category=categories["Apparel"]),
        }

    def _names(self, db, clause):
        return sorted(p.name for p in db.query(Product).filter(clause).all())

    def test_category_name_is_case_insensitive_substring(self, db, catalog):
        assert self._names(db, panel.category_name_contains("WIDGET")) == ["Gadget"]

    def test_name_contains(self, db, catalog):
        assert self._names(db, panel.name_contains("tea")) == ["Green Tea"]

    def test_price_buy_matches_raw_value(self, db, catalog):
        assert self._names(db, panel.price_buy_contains("150")) == ["Gadget"]

    def test_price_sell_matches_raw_value(self, db, catalog):
        # 30% of 1500
        assert self._names(db, panel.price_sell_contains("450")) == ["Gadget"]

    def test_stock_matches_raw_value(self, db, catalog):
        assert self._names(db, panel.stock_contains("30")) == ["Green Tea"]

    def test_columns_are_or_combined(self, db, catalog):
        clause = search_clause(panel.list_columns(), "wid")
        # "Gadget" matches through its category only
        assert self._names(db, clause) == ["Gadget"]

    def test_term_matching_several_columns(self, db, catalog):
        clause = search_clause(panel.list_columns(), "t")
        assert self._names(db, clause) == ["Gadget", "Green Tea", "Shirt"]

    def test_wildcards_match_literally(self, db, catalog):
        make_product(db, "50%_off Mug")
        assert self._names(db, panel.name_contains("_")) == ["50%_off Mug"]
        assert self._names(db, panel.name_contains("%")) == ["50%_off Mug"]
        assert self._names(db, search_clause(panel.list_columns(), "%_")) == ["50%_off Mug"]

    def test_no_searchable_columns(self):
        columns = (ColumnSpec(name="row_number", label="#", type="row_number"),)
        assert search_clause(columns, "x") is None


class TestFormFields:
    def test_field_order(self):
        assert [f.name for f in panel.form_fields()] == ["category", "name", "price_buy", "stock", "image"]

    def test_category_options_sorted_by_name(self, db, categories):
        field = panel.form_fields()[0]
        options = field.describe(db)["options"]
        assert [o["name"] for o in options] == ["Apparel", "Beverages", "Widgets-Category"]
        assert field.describe(db)["attribute"] == "category_id"

    def test_options_need_a_session(self):
        assert "options" not in panel.form_fields()[0].describe()

    def test_price_buy_prefix_and_suffix(self):
        described = panel.form_fields()[2].describe()
        assert described["prefix"] == "IDR"
        assert described["suffix"] == ".00"

    def test_image_upload_target(self):
        described = panel.form_fields()[4].describe()
        assert described["type"] == "upload"
        assert described["attribute"] == "image_path"
        assert described["upload"] == {"disk": "public", "path": "products", "visibility": "public"}

    def test_form_values(self, db, categories):
        product = make_product(db, "Widget", price_buy=100, stock=5,
                               category=categories["Apparel"], image_path="products/w.jpg")
        assert panel.form_values(product) == {
            "category": categories["Apparel"].id,
            "name": "Widget",
            "price_buy": "100.00",
            "stock": "5.00",
            "image": "products/w.jpg",
        }

    def test_form_values_keep_cents(self, db):
        product = make_product(db, "Widget", price_buy=Decimal("1234.56"), stock=Decimal("0.5"))
        values = panel.form_values(product)
        assert values["price_buy"] == "1234.56"
        assert values["stock"] == "0.50"


class TestContainsPattern:
    @pytest.mark.parametrize(
        "term,expected",
        [
            ("tea", "%tea%"),
            ("50%", "%50\\%%"),
            ("a_b", "%a\\_b%"),
            ("back\\slash", "%back\\\\slash%"),
        ],
    )
    def test_escapes_like_wildcards(self, term, expected):
        assert contains_pattern(term) == expected
