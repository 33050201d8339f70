from app.models import Category, Employee, Product, Profile
from app.seed import PRODUCTS, seed_database
from app.services import categories as category_service


class TestSeed:
    def test_seeds_catalogue_once(self, db):
        seed_database(db)
        seed_database(db)

        assert sorted(p.name for p in db.query(Profile)) == ["Admin", "CatalogManager", "SuperAdmin"]
        admin = db.query(Employee).one()
        assert admin.profile.name == "SuperAdmin"
        assert admin.passwd != "admin123"

        assert db.query(Category).count() == 8
        assert db.query(Product).count() == len(PRODUCTS)

    def test_category_tree_shape(self, db):
        seed_database(db)

        tree = category_service.get_tree(db)
        assert [node.link_rewrite for node in tree] == ["home"]
        assert [c.link_rewrite for c in tree[0].children] == ["clothes", "accessories", "art"]

        men = category_service.get_by_slug(db, "men")
        assert men.level_depth == 2
        assert [c.link_rewrite for c in men.breadcrumb] == ["clothes", "men"]

    def test_products_link_to_their_category(self, db):
        seed_database(db)

        mug = db.query(Product).filter_by(link_rewrite="customizable-mug").one()
        assert [c.link_rewrite for c in mug.categories] == ["home-accessories"]
        assert mug.default_category_id == mug.categories[0].id
        assert mug.reference == "demo_14"
