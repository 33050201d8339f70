"""Database seeding - profiles, default admin, demo category tree and catalogue.

Every step only runs against an empty table, so seeding is safe on every start.
Run standalone with ``python -m app.seed``.
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import SessionLocal, init_db
from app.logging_config import setup_logging
from app.models import (
    Category, Employee, Product, Profile, ProductCondition, ProductType, Visibility
)
from app.services.auth import get_password_hash
from app.services.images import ImageService
from app.services.legacy_migration import LegacyImageMigration
from app.services.storage import get_storage

logger = logging.getLogger(__name__)

PROFILES = ["SuperAdmin", "Admin", "CatalogManager"]

# (name, slug, description, parent slug, position)
CATEGORIES = [
    ("Clothes", "clothes", "Discover our fashionable clothes collection", "home", 0),
    ("Accessories", "accessories", "Items and accessories for your lifestyle", "home", 1),
    ("Art", "art", "Framed posters and vector graphics", "home", 2),
    ("Men", "men", "T-shirts, sweaters, and more for men", "clothes", 0),
    ("Women", "women", "T-shirts, sweaters, and more for women", "clothes", 1),
    ("Stationery", "stationery", "Notebooks and writing accessories", "accessories", 0),
    ("Home Accessories", "home-accessories", "Mugs, cushions, and home decor", "accessories", 1),
]

NOTEBOOK_SHORT = "120 sheets notebook with hard cover made of recycled cardboard. 16x22cm"
NOTEBOOK_LONG = (
    "The {} notebook is the best option to write down your most ingenious ideas. At work, "
    "at home or when traveling, its endearing design and manufacturing quality will make you "
    "feel like writing! 90 gsm paper / double spiral binding."
)
MUG_SHORT = "White Ceramic Mug, 325ml."
CUSHION_SHORT = "Cushion with removable cover and invisible zip on the back. 32x32cm"
CUSHION_LONG = (
    "The {} cushion will add a graphic and colorful touch to your sofa, armchair or bed. "
    "Create a modern and zen atmosphere that inspires relaxation. Cover 100% cotton, machine "
    "washable at 60°. Filling 100% hypoallergenic polyester."
)
VECTOR_SHORT = "Vector graphic, format: svg. Download for personal, private and non-commercial use."
VECTOR_LONG = (
    "You have a custom printing creative project? The vector graphic {} illustration can be "
    "used for printing purpose on any support, without size limitation."
)
SWEATER_SHORT = "Regular fit, round neckline, long sleeves. 100% cotton, brushed inner side for extra comfort."
POLYFAUNE = (
    "Studio Design's PolyFaune collection features classic products with colorful patterns, "
    "inspired by the traditional Japanese origamis. To wear with a chino or jeans."
)
SUBLIMATION = (
    " The sublimation textile printing process provides an exceptional color rendering "
    "and target durability."
)

# (name, slug, short description, description, price, quantity, reference, category slug)
PRODUCTS = [
    ("Hummingbird printed t-shirt", "hummingbird-printed-t-shirt",
     "Regular fit, round neckline, short sleeves. Made of extra long staple pima cotton.",
     "Symbol of lightness and delicacy, the hummingbird evokes curiosity and joy. " + POLYFAUNE + SUBLIMATION,
     "23.90", 300, "demo_1", "men"),
    ("Hummingbird printed sweater", "hummingbird-printed-sweater", SWEATER_SHORT,
     POLYFAUNE + SUBLIMATION, "35.90", 1200, "demo_3", "women"),
    ("Brown bear printed sweater", "brown-bear-printed-sweater", SWEATER_SHORT,
     POLYFAUNE, "35.90", 800, "demo_2", "women"),
    ("Mountain fox notebook", "mountain-fox-notebook", NOTEBOOK_SHORT,
     NOTEBOOK_LONG.format("Mountain fox"), "12.90", 600, "demo_8", "stationery"),
    ("Brown bear notebook", "brown-bear-notebook", NOTEBOOK_SHORT,
     NOTEBOOK_LONG.format("Brown bear"), "12.90", 600, "demo_9", "stationery"),
    ("Hummingbird notebook", "hummingbird-notebook", NOTEBOOK_SHORT,
     NOTEBOOK_LONG.format("Hummingbird"), "12.90", 600, "demo_10", "stationery"),
    ("Mug The best is yet to come", "mug-the-best-is-yet-to-come", MUG_SHORT,
     "The best is yet to come! Start the day off right with a positive thought. "
     "8.2cm diameter / 9.5cm height / 0.43kg. Dishwasher-proof.",
     "11.90", 300, "demo_11", "home-accessories"),
    ("Mug The adventure begins", "mug-the-adventure-begins", MUG_SHORT,
     "The adventure begins with a cup of coffee. Set out to conquer the day! "
     "8.2cm diameter / 9.5cm height / 0.43kg. Dishwasher-proof.",
     "11.90", 300, "demo_12", "home-accessories"),
    ("Mug Today is a good day", "mug-today-is-a-good-day", MUG_SHORT,
     "Add an optimistic touch to your morning coffee and start the day in a good mood! "
     "8.2cm diameter / 9.5cm height / 0.43kg. Dishwasher-proof.",
     "11.90", 300, "demo_13", "home-accessories"),
    ("Customizable mug", "customizable-mug", MUG_SHORT,
     "Customize your mug with the text of your choice. A mood, a message, a quote... "
     "It's up to you! Maximum number of characters: 30",
     "13.90", 300, "demo_14", "home-accessories"),
    ("Mountain fox cushion", "mountain-fox-cushion", CUSHION_SHORT,
     CUSHION_LONG.format("mountain fox"), "18.90", 600, "demo_15", "home-accessories"),
    ("Brown bear cushion", "brown-bear-cushion", CUSHION_SHORT,
     CUSHION_LONG.format("brown bear"), "18.90", 600, "demo_16", "home-accessories"),
    ("Hummingbird cushion", "hummingbird-cushion", CUSHION_SHORT,
     CUSHION_LONG.format("hummingbird"), "18.90", 600, "demo_17", "home-accessories"),
    ("The best is yet to come - Framed poster", "the-best-is-yet-to-come-framed-poster",
     "Printed on rigid matt paper and smooth surface.",
     "The best is yet to come! Give your walls a voice with a framed poster. This aesthetic, "
     "optimistic poster will look great on your desk or in an open-space office. Painted wooden "
     "frame with passe-partout for more depth.",
     "29.00", 900, "demo_6", "art"),
    ("The adventure begins - Framed poster", "the-adventure-begins-framed-poster",
     "Printed on rigid matt finish and smooth surface.",
     "Give your walls a voice with a framed poster. This aesthetic, adventurous poster will look "
     "great on your desk or in an open-space office. Painted wooden frame with passe-partout for "
     "more depth.",
     "29.00", 900, "demo_5", "art"),
    ("Today is a good day - Framed poster", "today-is-a-good-day-framed-poster",
     "Printed on rigid paper with matt finish and smooth surface.",
     "Today is a good day! Give your walls a voice with a framed poster. This aesthetic, "
     "optimistic poster will look great on your desk or in an open-space office. Painted wooden "
     "frame with passe-partout for more depth.",
     "29.00", 900, "demo_7", "art"),
    ("Mountain fox - Vector graphics", "mountain-fox-vector-graphics", VECTOR_SHORT,
     VECTOR_LONG.format("Mountain fox"), "9.00", 1200, "demo_18", "art"),
    ("Brown bear - Vector graphics", "brown-bear-vector-graphics", VECTOR_SHORT,
     VECTOR_LONG.format("Brown bear"), "9.00", 1200, "demo_19", "art"),
    ("Hummingbird - Vector graphics", "hummingbird-vector-graphics", VECTOR_SHORT,
     VECTOR_LONG.format("Hummingbird"), "9.00", 1200, "demo_20", "art"),
]

WHOLESALE_PRICE = Decimal("5.49")


def seed_profiles(db: Session):
    if db.query(Profile).count() > 0:
        return
    logger.info("Initializing profiles...")
    db.add_all([Profile(name=name) for name in PROFILES])
    db.commit()


def seed_admin(db: Session, email: str, password: str):
    if db.query(Employee).count() > 0:
        return
    super_admin = db.query(Profile).filter(Profile.name == "SuperAdmin").first()
    if super_admin is None:
        raise RuntimeError("SuperAdmin profile not found")

    db.add(Employee(
        email=email,
        passwd=get_password_hash(password),
        firstname="Admin",
        lastname="User",
        profile_id=super_admin.id,
        active=True,
    ))
    db.commit()
    logger.info(f"Default admin created: {email}")


def seed_categories(db: Session):
    if db.query(Category).count() > 0:
        return
    logger.info("Initializing category tree...")

    root = Category(
        name="Home",
        link_rewrite="home",
        description="Home category",
        is_root_category=True,
        level_depth=0,
        position=0,
        active=True,
    )
    db.add(root)
    db.flush()

    by_slug = {"home": root}
    for name, slug, description, parent_slug, position in CATEGORIES:
        parent = by_slug[parent_slug]
        category = Category(
            name=name,
            link_rewrite=slug,
            description=description,
            parent_id=parent.id,
            level_depth=parent.level_depth + 1,
            is_root_category=False,
            position=position,
            active=True,
        )
        db.add(category)
        db.flush()
        by_slug[slug] = category

    db.commit()


def seed_products(db: Session):
    if db.query(Product).count() > 0:
        return
    logger.info("Creating demo catalogue...")

    categories = {c.link_rewrite: c for c in db.query(Category).all()}
    created = 0
    for name, slug, short, description, price, quantity, reference, category_slug in PRODUCTS:
        category = categories.get(category_slug)
        if category is None:
            continue
        product = Product(
            name=name,
            link_rewrite=slug,
            description_short=short,
            description=description,
            price=Decimal(price),
            wholesale_price=WHOLESALE_PRICE,
            quantity=quantity,
            reference=reference,
            default_category_id=category.id,
            active=True,
            visibility=Visibility.BOTH,
            condition=ProductCondition.NEW,
            product_type=ProductType.STANDARD,
        )
        product.categories = [category]
        db.add(product)
        created += 1

    db.commit()
    logger.info(f"Created {created} demo products")


def seed_database(db: Session):
    """Run every seed step, then the legacy image migration when enabled."""
    settings = get_settings()
    seed_profiles(db)
    seed_admin(db, settings.admin_email, settings.admin_password)
    seed_categories(db)
    seed_products(db)

    try:
        LegacyImageMigration(db, ImageService(db, get_storage()), settings).run_if_enabled()
    except Exception as e:
        # Seeding never fails because of images
        logger.warning(f"Legacy image migration skipped: {e}")


def run_seed():
    db = SessionLocal()
    try:
        seed_database(db)
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging(get_settings().log_level)
    init_db()
    run_seed()
