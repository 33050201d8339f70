import pytest

from app.config import Settings
from app.exceptions import StorageError
from app.models import ProductImage
from app.services.images import ImageService
from app.services.legacy_migration import LegacyImageMigration, find_legacy_image_file
from app.services.storage import LocalStorage

IMAGE_XML = """<?xml version="1.0"?>
<entity_image>
  <entities>
    <image id="Hummingbird_printed_t_shirt_2" id_product="Hummingbird_printed_t_shirt" cover="0"/>
    <image id="Hummingbird_printed_t_shirt_1" id_product="Hummingbird_printed_t_shirt" cover="1"/>
    <image id="Mountain_fox_-_Vector_graphics" id_product="Mountain_fox_-_Vector_graphics" cover="1"/>
    <image id="Unknown_product" id_product="Unknown_product" cover="1"/>
  </entities>
</entity_image>
"""


class FailingOnceStorage(LocalStorage):
    """Local storage whose first save fails."""

    def __init__(self, base_dir):
        super().__init__(base_dir)
        self.failed = False

    def save(self, key, data, content_type=None):
        if not self.failed:
            self.failed = True
            raise StorageError(f"Disk full while writing {key}")
        super().save(key, data, content_type)


@pytest.fixture
def migration(db, storage):
    settings = Settings(legacy_migration_enabled=True, legacy_fixtures_path=None, legacy_img_path=None)
    return LegacyImageMigration(db, ImageService(db, storage), settings)


@pytest.fixture
def products(make_product):
    return {
        "tee": make_product("Hummingbird printed t-shirt", link_rewrite="hummingbird-printed-t-shirt"),
        "fox": make_product("Mountain fox - Vector graphics", link_rewrite="mountain-fox-vector-graphics"),
    }


def fixtures_dir(tmp_path, png_bytes, files):
    base = tmp_path / "fashion"
    (base / "data").mkdir(parents=True)
    (base / "data" / "image.xml").write_text(IMAGE_XML, encoding="utf-8")
    img_dir = base / "img" / "p"
    img_dir.mkdir(parents=True)
    for name in files:
        (img_dir / name).write_bytes(png_bytes)
    return base


class TestParsing:
    def test_parse_image_xml(self):
        entries = LegacyImageMigration.parse_image_xml(IMAGE_XML)
        assert entries[0] == ("Hummingbird_printed_t_shirt_2", "Hummingbird_printed_t_shirt", False)
        assert entries[1][2] is True
        assert len(entries) == 4

    def test_prefers_original_files(self, tmp_path):
        (tmp_path / "a-large_default.jpg").write_bytes(b"x")
        assert find_legacy_image_file(tmp_path, "a").name == "a-large_default.jpg"
        (tmp_path / "a.png").write_bytes(b"x")
        assert find_legacy_image_file(tmp_path, "a").name == "a.png"
        assert find_legacy_image_file(tmp_path, "b") is None


class TestFixtures:
    def test_imports_images_per_product(self, db, migration, products, tmp_path, png_bytes):
        base = fixtures_dir(tmp_path, png_bytes, [
            "Hummingbird_printed_t_shirt_1.jpg",
            "Hummingbird_printed_t_shirt_2.jpg",
            "Mountain_fox_-_Vector_graphics.jpg",
        ])

        result = migration.migrate(str(base))

        assert result == {"migrated": 3, "skipped": 1, "failed": 0}
        tee_images = (
            db.query(ProductImage)
            .filter_by(product_id=products["tee"].id)
            .order_by(ProductImage.position)
            .all()
        )
        assert [img.original_filename for img in tee_images] == [
            "Hummingbird_printed_t_shirt_1.jpg",
            "Hummingbird_printed_t_shirt_2.jpg",
        ]
        assert [img.cover for img in tee_images] == [True, False]

    def test_second_run_skips_imaged_products(self, migration, products, tmp_path, png_bytes):
        base = fixtures_dir(tmp_path, png_bytes, ["Mountain_fox_-_Vector_graphics.jpg"])
        first = migration.migrate(str(base))
        assert first["migrated"] == 1

        second = migration.migrate(str(base))
        assert second["migrated"] == 0
        assert second["skipped"] == 4

    def test_missing_file_is_skipped(self, migration, products, tmp_path, png_bytes):
        base = fixtures_dir(tmp_path, png_bytes, ["Hummingbird_printed_t_shirt_1.jpg"])
        result = migration.migrate(str(base))
        assert result == {"migrated": 1, "skipped": 3, "failed": 0}


    def test_flagged_image_later_in_group_takes_cover(self, db, migration, make_product, tmp_path, png_bytes):
        product = make_product("A")
        base = tmp_path / "fixtures"
        (base / "data").mkdir(parents=True)
        (base / "data" / "image.xml").write_text(
            '<image id="A_2" id_product="A" cover="1"/>\n'
            '<image id="A_1" id_product="A" cover="0"/>\n',
            encoding="utf-8",
        )
        (base / "img" / "p").mkdir(parents=True)
        for name in ("A_1.jpg", "A_2.jpg"):
            (base / "img" / "p" / name).write_bytes(png_bytes)

        assert migration.migrate(str(base))["migrated"] == 2
        images = db.query(ProductImage).filter_by(product_id=product.id).order_by(ProductImage.position).all()
        assert [(img.original_filename, img.cover) for img in images] == [("A_1.jpg", False), ("A_2.jpg", True)]

    def test_failed_copy_does_not_stop_the_batch(self, db, products, tmp_path, png_bytes):
        base = fixtures_dir(tmp_path, png_bytes, [
            "Hummingbird_printed_t_shirt_1.jpg",
            "Hummingbird_printed_t_shirt_2.jpg",
            "Mountain_fox_-_Vector_graphics.jpg",
        ])
        storage = FailingOnceStorage(tmp_path / "uploads")
        migration = LegacyImageMigration(db, ImageService(db, storage), Settings())

        result = migration.migrate(str(base))

        assert result == {"migrated": 2, "skipped": 1, "failed": 1}
        assert db.query(ProductImage).count() == 2


class TestOtherLayouts:
    def test_image_folder(self, db, migration, products, tmp_path, png_bytes):
        img_dir = tmp_path / "legacy" / "img" / "p"
        img_dir.mkdir(parents=True)
        (img_dir / "Hummingbird_printed_t_shirt.jpg").write_bytes(png_bytes)
        (img_dir / "Hummingbird_printed_t_shirt-home_default.jpg").write_bytes(png_bytes)
        (img_dir / "Nothing_here.jpg").write_bytes(png_bytes)

        result = migration.migrate(str(tmp_path / "legacy"))

        assert result == {"migrated": 1, "skipped": 1, "failed": 0}
        image = db.query(ProductImage).one()
        assert image.product_id == products["tee"].id
        assert image.cover is True

    def test_production_tree_is_not_migrated(self, migration, products, tmp_path):
        (tmp_path / "p" / "1").mkdir(parents=True)
        assert migration.migrate(str(tmp_path)) == {"migrated": 0, "skipped": 0, "failed": 0}

    def test_missing_directory(self, migration, tmp_path):
        with pytest.raises(NotADirectoryError):
            migration.migrate(str(tmp_path / "missing"))


class TestStartupHook:
    def test_disabled(self, db, storage):
        settings = Settings(legacy_migration_enabled=False)
        assert LegacyImageMigration(db, ImageService(db, storage), settings).run_if_enabled() is None

    def test_resolves_configured_path(self, db, storage, products, tmp_path, png_bytes):
        base = fixtures_dir(tmp_path, png_bytes, ["Mountain_fox_-_Vector_graphics.jpg"])
        settings = Settings(legacy_migration_enabled=True, legacy_fixtures_path=str(base))
        migration = LegacyImageMigration(db, ImageService(db, storage), settings)

        assert migration.resolve_legacy_path() == str(base)
        assert migration.run_if_enabled()["migrated"] == 1
