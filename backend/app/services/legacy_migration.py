"""
Legacy Image Migration

One-shot import of product images from a legacy shop installation.

Two layouts are understood:

- fixtures: ``<base>/data/image.xml`` lists ``<image id id_product cover>``
  entries and the files live in ``<base>/img/p/``;
- bare image folder: ``<base>/img/p/*.jpg`` named after the product.

A production image tree (``<base>/p/1/2/12.jpg``) is recognised but cannot
be mapped to products without the legacy database, so it is skipped.
"""
import logging
import re
from collections import defaultdict
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.exceptions import AppException
from app.models import Product, ProductImage
from app.services.images import ImageService, content_type_for
from app.services.slugs import legacy_id_to_slug

logger = logging.getLogger(__name__)

IMAGE_ELEMENT = re.compile(
    r'<image\s+id="([^"]+)"\s+id_product="([^"]+)"\s+cover="([^"]*)"',
    re.IGNORECASE,
)

# Thumbnails generated by the legacy shop (e.g. foo-home_default.jpg)
RESIZED_VARIANT = re.compile(r".*-[a-z_]+_default\.jpg$")

DEFAULT_LEGACY_PATHS = (
    Path("..") / "prestashop-legacy" / "install-dev" / "fixtures" / "fashion",
    Path("..") / "prestashop-legacy" / "img",
)


class LegacyImageMigration:
    """Copies legacy images into the configured storage and records them."""

    def __init__(self, db: Session, image_service: ImageService, settings: Settings | None = None):
        self.db = db
        self.images = image_service
        self.settings = settings or get_settings()

    def resolve_legacy_path(self) -> str | None:
        """First existing directory among the configured and conventional locations."""
        for configured in (self.settings.legacy_fixtures_path, self.settings.legacy_img_path):
            if configured and configured.strip() and Path(configured).is_dir():
                return configured
        for candidate in DEFAULT_LEGACY_PATHS:
            if candidate.is_dir():
                return str(candidate.resolve())
        return None

    def run_if_enabled(self) -> dict | None:
        """Startup hook: migrate when enabled and a path exists; never raises."""
        if not self.settings.legacy_migration_enabled:
            logger.debug("Legacy image migration is disabled")
            return None
        path = self.resolve_legacy_path()
        if not path:
            logger.debug("Legacy migration path not configured, skipping")
            return None
        try:
            result = self.migrate(path)
        except Exception as e:
            logger.warning(f"Legacy image migration failed: {e}")
            return None
        if result["migrated"]:
            logger.info(f"Legacy image migration completed: {result['migrated']} images migrated")
        return result

    def migrate(self, base_path: str) -> dict:
        """Migrate images below ``base_path``; returns migrated/skipped/failed counts."""
        base = Path(base_path)
        if not base.is_dir():
            raise NotADirectoryError(f"Legacy path is not a directory: {base_path}")

        img_dir = base / "img" / "p"
        image_xml = base / "data" / "image.xml"
        production_dir = base / "p"

        if image_xml.is_file() and img_dir.is_dir():
            return self._migrate_fixtures(image_xml, img_dir)
        if production_dir.is_dir():
            logger.info(
                "Production image migration requires the legacy database mapping; "
                "use a fixtures path instead"
            )
            return _counts()
        if img_dir.is_dir():
            return self._migrate_folder(img_dir)

        logger.warning(f"Could not find legacy image structure in {base_path}")
        return _counts()

    # ---------- fixtures ----------

    @staticmethod
    def parse_image_xml(content: str) -> list[tuple[str, str, bool]]:
        """(image id, legacy product id, cover) for each ``<image>`` element."""
        mappings = []
        for image_id, product_id, cover in IMAGE_ELEMENT.findall(content):
            mappings.append((image_id, product_id, cover == "1" or cover.lower() == "true"))
        return mappings

    def _migrate_fixtures(self, image_xml: Path, img_dir: Path) -> dict:
        counts = _counts()
        by_product = defaultdict(list)
        for image_id, legacy_product, cover in self.parse_image_xml(image_xml.read_text(encoding="utf-8")):
            by_product[legacy_product].append((image_id, cover))

        for legacy_product, entries in by_product.items():
            slug = legacy_id_to_slug(legacy_product)
            product = self._product_without_images(slug)
            if product is None:
                counts["skipped"] += len(entries)
                continue

            for position, (image_id, cover) in enumerate(sorted(entries)):
                source = find_legacy_image_file(img_dir, image_id)
                if source is None:
                    logger.warning(f"Image file not found for {image_id}")
                    counts["skipped"] += 1
                    continue
                self._copy(product, source, cover, position, counts)
        return counts

    # ---------- image folder ----------

    def _migrate_folder(self, img_dir: Path) -> dict:
        counts = _counts()
        processed = set()
        files = sorted(
            p for p in img_dir.iterdir()
            if p.is_file() and p.name.endswith(".jpg") and not RESIZED_VARIANT.match(p.name)
        )
        for source in files:
            slug = legacy_id_to_slug(source.name[:-len(".jpg")])
            if slug in processed:
                continue
            product = self._product_without_images(slug)
            if product is None:
                counts["skipped"] += 1
                continue
            if self._copy(product, source, True, 0, counts):
                processed.add(slug)
        return counts

    # ---------- shared ----------

    def _product_without_images(self, slug: str) -> Product | None:
        product = self.db.query(Product).filter(Product.link_rewrite == slug).first()
        if product is None:
            logger.debug(f"No product found for slug={slug}, skipping")
            return None
        has_images = (
            self.db.query(ProductImage.id).filter(ProductImage.product_id == product.id).first()
        )
        if has_images:
            logger.debug(f"Product {slug} already has images, skipping")
            return None
        return product

    def _copy(self, product: Product, source: Path, cover: bool, position: int, counts: dict) -> bool:
        try:
            self.images.store_image(
                product.id,
                source.read_bytes(),
                source.name,
                content_type_for(source.name),
                cover=cover,
                position=position,
            )
        except (OSError, SQLAlchemyError, AppException) as e:
            logger.warning(f"Failed to migrate {source.name}: {e}")
            counts["failed"] += 1
            return False
        counts["migrated"] += 1
        return True


def find_legacy_image_file(img_dir: Path, image_id: str) -> Path | None:
    """Locate the file for ``image_id``, preferring originals over resized copies."""
    candidates = [f"{image_id}{ext}" for ext in (".jpg", ".jpeg", ".png", ".webp")]
    candidates += [f"{image_id}-large_default.jpg", f"{image_id}-medium_default.jpg"]
    for name in candidates:
        path = img_dir / name
        if path.is_file():
            return path
    return None


def _counts() -> dict:
    return {"migrated": 0, "skipped": 0, "failed": 0}
