import pytest

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import Category
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services import categories as category_service


def create(db, **fields):
    return category_service.create(db, CategoryCreate(**fields))


class TestCreate:
    def test_root_category(self, db):
        root = create(db, name="Clothes")
        assert root.level_depth == 0
        assert root.is_root_category is True
        assert root.parent_id is None
        assert root.link_rewrite == "clothes"
        assert root.position == 0

    def test_child_depth_and_position(self, db):
        root = create(db, name="Clothes")
        men = create(db, name="Men", parent_id=root.id)
        women = create(db, name="Women", parent_id=root.id)
        assert men.level_depth == 1
        assert men.is_root_category is False
        assert (men.position, women.position) == (0, 1)

        shirts = create(db, name="Shirts", parent_id=men.id)
        assert shirts.level_depth == 2

    def test_same_name_gets_suffixed_slug(self, db):
        first = create(db, name="Men's Shirt")
        second = create(db, name="Men's Shirt")
        assert first.link_rewrite == "mens-shirt"
        assert second.link_rewrite == "mens-shirt-1"

    def test_explicit_slug_is_uniquified(self, db):
        create(db, name="Art", link_rewrite="art")
        assert create(db, name="Posters", link_rewrite="art").link_rewrite == "art-1"

    def test_unknown_parent(self, db):
        with pytest.raises(NotFoundError):
            create(db, name="Orphan", parent_id=999)


class TestUpdate:
    def test_reparent_recomputes_subtree_depths(self, db):
        a = create(db, name="A")
        b = create(db, name="B")
        child = create(db, name="Child", parent_id=a.id)
        grandchild = create(db, name="Grandchild", parent_id=child.id)

        nested = create(db, name="Nested", parent_id=b.id)
        updated = category_service.update(db, child.id, CategoryUpdate(parent_id=nested.id))

        assert updated.level_depth == 2
        assert db.get(Category, grandchild.id).level_depth == 3

    def test_explicit_null_parent_moves_to_root(self, db):
        root = create(db, name="Root")
        child = create(db, name="Child", parent_id=root.id)

        updated = category_service.update(db, child.id, CategoryUpdate.model_validate({"parentId": None}))
        assert updated.parent_id is None
        assert updated.level_depth == 0
        assert updated.is_root_category is True

    def test_omitted_parent_is_unchanged(self, db):
        root = create(db, name="Root")
        child = create(db, name="Child", parent_id=root.id)

        updated = category_service.update(db, child.id, CategoryUpdate(name="Renamed"))
        assert updated.parent_id == root.id
        assert updated.name == "Renamed"
        assert updated.link_rewrite == "child"

    def test_cannot_move_below_own_descendant(self, db):
        root = create(db, name="Root")
        child = create(db, name="Child", parent_id=root.id)
        with pytest.raises(ValidationError):
            category_service.update(db, root.id, CategoryUpdate(parent_id=child.id))
        with pytest.raises(ValidationError):
            category_service.update(db, root.id, CategoryUpdate(parent_id=root.id))

    def test_slug_collision_on_rename(self, db):
        create(db, name="Art")
        other = create(db, name="Posters")
        with pytest.raises(ValidationError):
            category_service.update(db, other.id, CategoryUpdate(link_rewrite="art"))

    def test_unknown_category(self, db):
        with pytest.raises(NotFoundError):
            category_service.update(db, 42, CategoryUpdate(name="x"))


class TestDelete:
    def test_leaf_without_products(self, db):
        leaf = create(db, name="Leaf")
        category_service.delete(db, leaf.id)
        assert db.get(Category, leaf.id) is None

    def test_with_children(self, db):
        root = create(db, name="Root")
        create(db, name="Child", parent_id=root.id)
        with pytest.raises(ConflictError):
            category_service.delete(db, root.id)

    def test_with_products(self, db, make_category, make_product):
        category = make_category("Mugs")
        make_product("Mug", categories=[category])
        with pytest.raises(ConflictError):
            category_service.delete(db, category.id)

    def test_default_category_of_product(self, db, make_category, make_product):
        category = make_category("Mugs")
        make_product("Mug", default_category_id=category.id)
        with pytest.raises(ConflictError):
            category_service.delete(db, category.id)


class TestTree:
    def test_nested_and_ordered(self, db, make_category):
        home = make_category("Home", position=0)
        art = make_category("Art", parent=home, position=2)
        clothes = make_category("Clothes", parent=home, position=0)
        make_category("Women", parent=clothes, position=1)
        make_category("Men", parent=clothes, position=0)

        tree = category_service.get_tree(db)
        assert [n.name for n in tree] == ["Home"]
        assert [n.name for n in tree[0].children] == ["Clothes", "Art"]
        assert [n.name for n in tree[0].children[0].children] == ["Men", "Women"]
        assert art.level_depth == 1

    def test_inactive_subtree_is_pruned(self, db, make_category):
        home = make_category("Home")
        hidden = make_category("Hidden", parent=home, active=False)
        make_category("Below hidden", parent=hidden)

        tree = category_service.get_tree(db)
        assert tree[0].children == []

    def test_flat_list_by_depth(self, db, make_category):
        home = make_category("Home")
        make_category("Child", parent=home)
        make_category("Off", active=False)
        assert [c.name for c in category_service.list_all(db)] == ["Home", "Child"]

    def test_children(self, db, make_category):
        home = make_category("Home")
        make_category("B", parent=home, position=1)
        make_category("A", parent=home, position=0)
        make_category("Inactive", parent=home, position=2, active=False)
        assert [c.name for c in category_service.get_children(db, "home")] == ["A", "B"]


class TestBreadcrumb:
    def test_excludes_root_category(self, db, make_category):
        home = make_category("Home")
        clothes = make_category("Clothes", parent=home)
        men = make_category("Men", parent=clothes)

        response = category_service.get_by_slug(db, "men")
        assert [c.link_rewrite for c in response.breadcrumb] == ["clothes", "men"]
        assert category_service.get_by_id(db, home.id).breadcrumb == []
        assert men.level_depth == 2

    def test_unknown_slug(self, db):
        with pytest.raises(NotFoundError):
            category_service.get_by_slug(db, "nope")
