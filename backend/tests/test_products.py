from decimal import Decimal

import pytest

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import Product, ProductAttribute, ProductImage, Visibility
from app.schemas.product import ProductCreate, ProductUpdate, VariantCreate, SpecificPriceCreate
from app.services import products as product_service
from app.services.pagination import PageRequest


class TestCreate:
    def test_defaults_and_slug(self, db, make_category):
        men = make_category("Men")
        detail = product_service.create(db, ProductCreate(
            name="Men's Shirt", price=Decimal("19.90"), category_ids=[men.id, 999],
            default_category_id=men.id,
        ))
        assert detail.link_rewrite == "mens-shirt"
        assert detail.visibility == "BOTH"
        assert detail.condition == "NEW"
        assert detail.product_type == "STANDARD"
        assert detail.in_stock is False
        assert [c.id for c in detail.categories] == [men.id]
        assert detail.default_category.id == men.id

        again = product_service.create(db, ProductCreate(name="Men's Shirt", price=Decimal("1")))
        assert again.link_rewrite == "mens-shirt-1"

    def test_enum_strings_are_parsed(self, db):
        detail = product_service.create(db, ProductCreate(
            name="Poster", price=Decimal("29"), visibility="catalog", condition="USED",
            product_type="virtual",
        ))
        assert (detail.visibility, detail.condition, detail.product_type) == ("CATALOG", "USED", "VIRTUAL")

    def test_unknown_enum_value(self, db):
        with pytest.raises(ValidationError):
            product_service.create(db, ProductCreate(name="Poster", price=Decimal("29"), visibility="everywhere"))
        assert db.query(Product).count() == 0

    def test_unknown_default_category_is_ignored(self, db):
        detail = product_service.create(db, ProductCreate(name="Mug", price=Decimal("9"), default_category_id=404))
        assert detail.default_category is None


class TestUpdate:
    def test_only_sent_values_change(self, db, make_product):
        product = make_product("Mug", price="11.90", reference="demo_11", quantity=5)
        detail = product_service.update(db, product.id, ProductUpdate.model_validate(
            {"price": 13.5, "reference": None}
        ))
        assert detail.price == Decimal("13.5")
        assert detail.reference == "demo_11"
        assert detail.quantity == 5
        assert detail.name == "Mug"

    def test_bad_enum(self, db, make_product):
        product = make_product("Mug")
        with pytest.raises(ValidationError):
            product_service.update(db, product.id, ProductUpdate(condition="BROKEN"))

    def test_unknown_product(self, db):
        with pytest.raises(NotFoundError):
            product_service.update(db, 1, ProductUpdate(name="x"))


class TestStorefrontQueries:
    def test_search_filters_hidden_and_inactive(self, db, make_product):
        make_product("Hummingbird printed t-shirt")
        make_product("Notebook", description="A HUMMINGBIRD on the cover")
        make_product("Poster", reference="hummingbird-ref")
        make_product("Hummingbird cushion", active=False)
        make_product("Hummingbird mug", visibility=Visibility.NONE)
        make_product("Brown bear notebook")

        page = product_service.search(db, "hummingbird", PageRequest())
        names = sorted(item.name for item in page.content)
        assert names == ["Hummingbird printed t-shirt", "Notebook", "Poster"]
        assert page.total_elements == 3

    def test_search_treats_wildcards_literally(self, db, make_product):
        make_product("Poster 50% off")
        make_product("Poster 500")
        make_product("Mug")

        names = [item.name for item in product_service.search(db, "50%", PageRequest()).content]
        assert names == ["Poster 50% off"]
        assert product_service.search(db, "_", PageRequest()).total_elements == 0

    def test_blank_search_keyword(self, db, make_product):
        make_product("Mug")
        with pytest.raises(ValidationError):
            product_service.search(db, "   ", PageRequest())

    def test_listing_pages(self, db, make_product):
        for i in range(5):
            make_product(f"Product {i}", price=str(10 + i))

        page = product_service.list_active(db, PageRequest(page=1, size=2, sort="price,asc"))
        assert [item.price for item in page.content] == [Decimal("12"), Decimal("13")]
        assert (page.total_elements, page.total_pages, page.first, page.last) == (5, 3, False, False)

    def test_unknown_sort_falls_back(self, db, make_product):
        make_product("A")
        page = product_service.list_active(db, PageRequest(sort="password,desc"))
        assert page.total_elements == 1

    def test_by_category(self, db, make_category, make_product):
        mugs = make_category("Mugs")
        make_product("Mug", categories=[mugs])
        make_product("Tee")
        page = product_service.list_by_category(db, "mugs", PageRequest())
        assert [item.name for item in page.content] == ["Mug"]

    def test_cover_image_falls_back_to_first_position(self, db, make_product):
        product = make_product("Mug")
        db.add_all([
            ProductImage(product_id=product.id, filename="b.jpg", position=1, cover=False),
            ProductImage(product_id=product.id, filename="a.jpg", position=0, cover=False),
        ])
        db.commit()
        item = product_service.list_active(db, PageRequest()).content[0]
        assert item.cover_image == f"/images/products/{product.id}/a.jpg"


class TestDelete:
    def test_cascades(self, db, make_category, make_product):
        category = make_category("Mugs")
        product = make_product("Mug", categories=[category])
        db.add(ProductAttribute(product_id=product.id, name="Large"))
        db.add(ProductImage(product_id=product.id, filename="x.jpg", position=0, cover=True))
        db.commit()

        product_service.delete(db, product.id)
        assert db.query(ProductAttribute).count() == 0
        assert db.query(ProductImage).count() == 0

    def test_unknown(self, db):
        with pytest.raises(NotFoundError):
            product_service.delete(db, 5)

    def test_bulk_operations_skip_unknown_ids(self, db, make_product):
        a = make_product("A")
        b = make_product("B")
        assert product_service.bulk_update_status(db, [a.id, b.id, 999], False) == 2
        assert db.get(Product, a.id).active is False

        assert product_service.bulk_delete(db, [a.id, 999]) == 1
        assert db.query(Product).count() == 1


class TestVariants:
    def test_add_and_list(self, db, make_product):
        product = make_product("Tee", price="20")
        variant = product_service.add_variant(db, product.id, VariantCreate(
            name="Size L", price_impact=Decimal("2.5"), quantity=3,
        ))
        assert variant.price == Decimal("22.5")
        assert variant.in_stock is True
        assert [v.id for v in product_service.list_variants(db, product.id)] == [variant.id]

    def test_cross_product_delete_is_a_conflict(self, db, make_product):
        tee = make_product("Tee")
        mug = make_product("Mug")
        variant = product_service.add_variant(db, tee.id, VariantCreate(name="S"))

        with pytest.raises(ConflictError):
            product_service.delete_variant(db, mug.id, variant.id)
        with pytest.raises(NotFoundError):
            product_service.delete_variant(db, tee.id, 12345)

        product_service.delete_variant(db, tee.id, variant.id)
        assert product_service.list_variants(db, tee.id) == []


class TestSpecificPrices:
    def test_add_and_apply(self, db, make_product):
        product = make_product("Tee", price="100")
        rule = product_service.add_specific_price(db, product.id, SpecificPriceCreate(
            reduction=Decimal("10"), reduction_type="percentage",
        ))
        assert rule.active is True
        assert product_service.get_by_id(db, product.id).sale_price == Decimal("90")
        assert len(product_service.list_specific_prices(db, product.id)) == 1

    @pytest.mark.parametrize("payload", [
        {"reduction": -1},
        {"reduction": 5, "reductionType": "BOGUS"},
        {"reduction": 150, "reductionType": "PERCENTAGE"},
        {"reduction": 5, "fromDate": "2030-01-02T00:00:00", "toDate": "2030-01-01T00:00:00"},
    ])
    def test_rejects_invalid_rules(self, db, make_product, payload):
        product = make_product("Tee")
        with pytest.raises(ValidationError):
            product_service.add_specific_price(db, product.id, SpecificPriceCreate.model_validate(payload))
