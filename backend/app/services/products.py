"""
Product Catalog Service

Storefront listings, search and product pages plus the admin CRUD,
bulk operations, variants and specific prices. View objects are assembled
from explicit queries (images, variants, categories, sale prices).
"""
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import transaction
from app.exceptions import NotFoundError, ValidationError, ConflictError
from app.models import (
    Category, Product, ProductAttribute, ProductImage, SpecificPrice, ReductionType,
    Visibility, ProductCondition, ProductType, category_products,
)
from app.models.product import STOREFRONT_VISIBILITIES
from app.schemas.common import Page
from app.schemas.product import (
    ProductListItem, ProductDetail, ProductCreate, ProductUpdate,
    VariantResponse, VariantCreate, SpecificPriceCreate, SpecificPriceResponse,
)
from app.services import categories as category_service
from app.services import images as image_views
from app.services import pricing
from app.services.pagination import PageRequest, apply_sort, build_page
from app.services.slugs import slugify, slug_exists, unique_slug

logger = logging.getLogger(__name__)

STOREFRONT_SORT = "dateAdd,desc"
ADMIN_SORT = "dateUpd,desc"

# Plain columns copied from create/update payloads when a value is sent
SIMPLE_FIELDS = (
    "name", "description", "description_short", "price", "wholesale_price", "ecotax",
    "quantity", "minimal_quantity", "low_stock_threshold", "reference", "ean13", "isbn",
    "upc", "weight", "width", "height", "depth", "active", "on_sale", "online_only",
    "available_for_order", "show_price", "meta_title", "meta_description",
)

ENUM_FIELDS = {
    "visibility": Visibility,
    "condition": ProductCondition,
    "product_type": ProductType,
}


def parse_enum(enum_cls, value: str, field: str):
    """Closed-set parsing of enum strings coming from clients."""
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Allowed: {allowed}")


# ============== Views ==============

def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def _list_item_kwargs(product: Product, sale_price, cover_image, default_category) -> dict:
    return dict(
        id=product.id,
        name=product.name,
        description_short=product.description_short,
        link_rewrite=product.link_rewrite,
        price=product.price,
        sale_price=sale_price,
        reference=product.reference,
        quantity=product.quantity or 0,
        in_stock=product.in_stock,
        on_sale=bool(product.on_sale),
        cover_image=cover_image,
        default_category=category_service.to_summary(default_category) if default_category else None,
    )


def to_list_items(db: Session, products: list[Product]) -> list[ProductListItem]:
    """Listing views with batch-loaded sale prices, cover images and default categories."""
    if not products:
        return []
    sale_prices = pricing.sale_prices(db, products)
    covers = image_views.cover_urls(db, [p.id for p in products])
    category_ids = {p.default_category_id for p in products if p.default_category_id}
    default_categories = {
        c.id: c for c in db.query(Category).filter(Category.id.in_(category_ids)).all()
    } if category_ids else {}

    return [
        ProductListItem(**_list_item_kwargs(
            product,
            sale_prices.get(product.id),
            covers.get(product.id),
            default_categories.get(product.default_category_id),
        ))
        for product in products
    ]


def to_variant(variant: ProductAttribute, base_price) -> VariantResponse:
    return VariantResponse(
        id=variant.id,
        product_id=variant.product_id,
        name=variant.name,
        reference=variant.reference,
        ean13=variant.ean13,
        price=variant.final_price(base_price),
        price_impact=variant.price_impact or 0,
        weight_impact=variant.weight_impact or 0,
        quantity=variant.quantity or 0,
        in_stock=variant.in_stock,
        default_on=bool(variant.default_on),
    )


def _variants_of(db: Session, product_id: int) -> list[ProductAttribute]:
    return (
        db.query(ProductAttribute)
        .filter(ProductAttribute.product_id == product_id)
        .order_by(ProductAttribute.id)
        .all()
    )


def _categories_of(db: Session, product_id: int) -> list[Category]:
    return (
        db.query(Category)
        .join(category_products, category_products.c.category_id == Category.id)
        .filter(category_products.c.product_id == product_id)
        .order_by(Category.level_depth, Category.position, Category.id)
        .all()
    )


def to_detail(db: Session, product: Product) -> ProductDetail:
    """Full product view: images, variants, categories, breadcrumb and sale price."""
    images = (
        db.query(ProductImage)
        .filter(ProductImage.product_id == product.id)
        .order_by(ProductImage.position, ProductImage.id)
        .all()
    )
    cover = next((img for img in images if img.cover), images[0] if images else None)

    default_category = (
        db.get(Category, product.default_category_id) if product.default_category_id else None
    )
    breadcrumb = category_service.get_breadcrumb(db, default_category) if default_category else []

    return ProductDetail(
        **_list_item_kwargs(
            product,
            pricing.sale_price(db, product.id, product.price),
            cover.url if cover else None,
            default_category,
        ),
        description=product.description,
        wholesale_price=product.wholesale_price,
        ecotax=product.ecotax,
        minimal_quantity=product.minimal_quantity,
        low_stock_threshold=product.low_stock_threshold,
        ean13=product.ean13,
        isbn=product.isbn,
        upc=product.upc,
        active=bool(product.active),
        visibility=_enum_value(product.visibility),
        condition=_enum_value(product.condition),
        product_type=_enum_value(product.product_type),
        online_only=bool(product.online_only),
        available_for_order=bool(product.available_for_order),
        show_price=bool(product.show_price),
        weight=product.weight,
        width=product.width,
        height=product.height,
        depth=product.depth,
        meta_title=product.meta_title,
        meta_description=product.meta_description,
        breadcrumb=[category_service.to_summary(c) for c in breadcrumb],
        categories=[category_service.to_summary(c) for c in _categories_of(db, product.id)],
        images=[image_views.to_response(img) for img in images],
        variants=[to_variant(v, product.price) for v in _variants_of(db, product.id)],
        date_add=product.date_add,
        date_upd=product.date_upd,
    )


# ============== Queries ==============

def _storefront(query):
    return query.filter(
        Product.active.is_(True),
        Product.visibility.in_(STOREFRONT_VISIBILITIES),
    )


def _paginate(db: Session, query, page: PageRequest, default_sort: str) -> Page:
    total = query.count()
    products = apply_sort(query, page.sort, default_sort).offset(page.offset).limit(page.size).all()
    return build_page(to_list_items(db, products), total, page)


def list_active(db: Session, page: PageRequest) -> Page:
    return _paginate(db, _storefront(db.query(Product)), page, STOREFRONT_SORT)


def list_by_category(db: Session, slug: str, page: PageRequest) -> Page:
    category = category_service.find_by_slug(db, slug)
    query = _storefront(
        db.query(Product)
        .join(category_products, category_products.c.product_id == Product.id)
        .filter(category_products.c.category_id == category.id)
    )
    return _paginate(db, query, page, STOREFRONT_SORT)


def _like_pattern(keyword: str) -> str:
    """Substring pattern with LIKE wildcards in ``keyword`` taken literally."""
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search(db: Session, keyword: str, page: PageRequest) -> Page:
    """Case-insensitive match on name, description or reference."""
    keyword = keyword.strip()
    if not keyword:
        raise ValidationError("Search keyword must not be empty")

    pattern = _like_pattern(keyword)
    query = _storefront(db.query(Product)).filter(
        or_(
            Product.name.ilike(pattern, escape="\\"),
            Product.description.ilike(pattern, escape="\\"),
            Product.reference.ilike(pattern, escape="\\"),
        )
    )
    return _paginate(db, query, page, STOREFRONT_SORT)


def list_all(db: Session, page: PageRequest) -> Page:
    """Admin listing, inactive and hidden products included."""
    return _paginate(db, db.query(Product), page, ADMIN_SORT)


def find_by_slug(db: Session, slug: str) -> Product:
    product = db.query(Product).filter(Product.link_rewrite == slug).first()
    if product is None:
        raise NotFoundError(f"Product not found: {slug}")
    return product


def find_by_id(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"Product not found: {product_id}")
    return product


def get_by_slug(db: Session, slug: str) -> ProductDetail:
    return to_detail(db, find_by_slug(db, slug))


def get_by_id(db: Session, product_id: int) -> ProductDetail:
    return to_detail(db, find_by_id(db, product_id))


# ============== Mutations ==============

def _apply_fields(db: Session, product: Product, values: dict):
    """Copy the non-null payload values onto ``product``."""
    for field in SIMPLE_FIELDS:
        if values.get(field) is not None:
            setattr(product, field, values[field])

    for field, enum_cls in ENUM_FIELDS.items():
        if values.get(field) is not None:
            setattr(product, field, parse_enum(enum_cls, values[field], field))

    if values.get("default_category_id") is not None:
        category = db.get(Category, values["default_category_id"])
        if category is not None:
            product.default_category_id = category.id
        else:
            logger.warning(f"Ignoring unknown default category {values['default_category_id']}")

    if values.get("category_ids") is not None:
        ids = set(values["category_ids"])
        found = db.query(Category).filter(Category.id.in_(ids)).all() if ids else []
        if len(found) != len(ids):
            logger.warning(f"Ignoring unknown category ids {sorted(ids - {c.id for c in found})}")
        product.categories = found


def create(db: Session, data: ProductCreate) -> ProductDetail:
    values = data.model_dump()
    with transaction(db):
        product = Product()
        _apply_fields(db, product, values)
        product.link_rewrite = unique_slug(db, Product, data.link_rewrite or data.name)
        db.add(product)

    db.refresh(product)
    logger.info(f"Created product {product.id} '{product.link_rewrite}'")
    return to_detail(db, product)


def update(db: Session, product_id: int, data: ProductUpdate) -> ProductDetail:
    """Partial update: fields omitted or sent as null keep their current value."""
    product = find_by_id(db, product_id)
    values = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    with transaction(db):
        if "link_rewrite" in values:
            slug = slugify(values["link_rewrite"])
            if not slug:
                raise ValidationError("Slug must not be empty")
            if slug_exists(db, Product, slug, exclude_id=product.id):
                raise ValidationError(f"Slug already in use: {slug}")
            product.link_rewrite = slug
        _apply_fields(db, product, values)

    db.refresh(product)
    logger.info(f"Updated product {product.id}")
    return to_detail(db, product)


def _image_files(db: Session, product_ids: list[int]) -> list[ProductImage]:
    return db.query(ProductImage).filter(ProductImage.product_id.in_(product_ids)).all()


def delete(db: Session, product_id: int, image_service=None):
    """Delete a product with its images, variants, specific prices and category links."""
    product = find_by_id(db, product_id)
    if image_service is not None:
        for image in _image_files(db, [product.id]):
            image_service.remove_file(image)

    with transaction(db):
        db.delete(product)
    logger.info(f"Deleted product {product_id}")


def bulk_update_status(db: Session, ids: list[int], active: bool) -> int:
    """Set ``active`` on every existing product in ``ids``; unknown ids are skipped."""
    with transaction(db):
        products = db.query(Product).filter(Product.id.in_(ids)).all() if ids else []
        for product in products:
            product.active = active
    logger.info(f"Bulk status update: {len(products)}/{len(ids)} products set active={active}")
    return len(products)


def bulk_delete(db: Session, ids: list[int], image_service=None) -> int:
    products = db.query(Product).filter(Product.id.in_(ids)).all() if ids else []
    if image_service is not None and products:
        for image in _image_files(db, [p.id for p in products]):
            image_service.remove_file(image)

    with transaction(db):
        for product in products:
            db.delete(product)
    logger.info(f"Bulk delete: {len(products)}/{len(ids)} products removed")
    return len(products)


# ============== Variants ==============

def list_variants(db: Session, product_id: int) -> list[VariantResponse]:
    product = find_by_id(db, product_id)
    return [to_variant(v, product.price) for v in _variants_of(db, product.id)]


def add_variant(db: Session, product_id: int, data: VariantCreate) -> VariantResponse:
    product = find_by_id(db, product_id)
    with transaction(db):
        variant = ProductAttribute(
            product_id=product.id,
            name=data.name,
            reference=data.reference,
            ean13=data.ean13,
            price_impact=data.price_impact,
            weight_impact=data.weight_impact,
            quantity=data.quantity,
            default_on=data.default_on,
        )
        db.add(variant)

    db.refresh(variant)
    logger.info(f"Added variant {variant.id} to product {product.id}")
    return to_variant(variant, product.price)


def delete_variant(db: Session, product_id: int, variant_id: int):
    variant = db.get(ProductAttribute, variant_id)
    if variant is None:
        raise NotFoundError(f"Variant not found: {variant_id}")
    if variant.product_id != product_id:
        raise ConflictError("Variant does not belong to product")

    with transaction(db):
        db.delete(variant)
    logger.info(f"Deleted variant {variant_id} of product {product_id}")


# ============== Specific prices ==============

def to_specific_price(rule: SpecificPrice) -> SpecificPriceResponse:
    return SpecificPriceResponse(
        id=rule.id,
        product_id=rule.product_id,
        product_attribute_id=rule.product_attribute_id,
        reduction=rule.reduction,
        reduction_type=_enum_value(rule.reduction_type),
        from_quantity=rule.from_quantity,
        from_date=rule.from_date,
        to_date=rule.to_date,
        active=rule.is_active(pricing.utcnow()),
    )


def list_specific_prices(db: Session, product_id: int) -> list[SpecificPriceResponse]:
    find_by_id(db, product_id)
    rules = (
        db.query(SpecificPrice)
        .filter(SpecificPrice.product_id == product_id)
        .order_by(SpecificPrice.id)
        .all()
    )
    return [to_specific_price(r) for r in rules]


def add_specific_price(db: Session, product_id: int, data: SpecificPriceCreate) -> SpecificPriceResponse:
    product = find_by_id(db, product_id)

    reduction_type = parse_enum(ReductionType, data.reduction_type, "reduction type")
    if data.reduction < 0:
        raise ValidationError("Reduction must not be negative")
    if reduction_type == ReductionType.PERCENTAGE and data.reduction > 100:
        raise ValidationError("Percentage reduction must not exceed 100")

    from_date = pricing.to_naive_utc(data.from_date)
    to_date = pricing.to_naive_utc(data.to_date)
    if from_date and to_date and from_date > to_date:
        raise ValidationError("fromDate must not be after toDate")

    if data.product_attribute_id is not None:
        variant = db.get(ProductAttribute, data.product_attribute_id)
        if variant is None or variant.product_id != product.id:
            raise NotFoundError(f"Variant not found: {data.product_attribute_id}")

    with transaction(db):
        rule = SpecificPrice(
            product_id=product.id,
            product_attribute_id=data.product_attribute_id,
            reduction=data.reduction,
            reduction_type=reduction_type,
            from_quantity=data.from_quantity,
            from_date=from_date,
            to_date=to_date,
        )
        db.add(rule)

    db.refresh(rule)
    logger.info(f"Added {reduction_type.value} specific price {rule.id} to product {product.id}")
    return to_specific_price(rule)
