"""
Category Tree Service

Categories are stored with parent pointers only. Trees and child listings are
assembled from flat queries through a children-by-parent index.
"""
import logging
from collections import defaultdict

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import transaction
from app.exceptions import NotFoundError, ValidationError, ConflictError
from app.models import Category, Product, category_products
from app.schemas.category import (
    CategorySummary, CategoryResponse, CategoryTreeNode, CategoryCreate, CategoryUpdate
)
from app.services.slugs import slugify, slug_exists, unique_slug

logger = logging.getLogger(__name__)


# ============== Views ==============

def to_summary(category: Category) -> CategorySummary:
    return CategorySummary(id=category.id, name=category.name, link_rewrite=category.link_rewrite)


def to_response(category: Category, breadcrumb: list[Category] | None = None) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description,
        link_rewrite=category.link_rewrite,
        parent_id=category.parent_id,
        level_depth=category.level_depth,
        position=category.position,
        active=category.active,
        is_root_category=category.is_root_category,
        meta_title=category.meta_title,
        meta_description=category.meta_description,
        breadcrumb=[to_summary(c) for c in breadcrumb or []],
        date_add=category.date_add,
        date_upd=category.date_upd,
    )


def get_breadcrumb(db: Session, category: Category) -> list[Category]:
    """
    Ancestor chain ordered root -> leaf, ending with ``category`` itself.

    The walk stops at the first category flagged ``is_root_category`` (which
    is excluded) or at a category without parent.
    """
    chain = []
    seen = set()
    current = category
    while current is not None and not current.is_root_category and current.id not in seen:
        seen.add(current.id)
        chain.append(current)
        current = db.get(Category, current.parent_id) if current.parent_id is not None else None
    chain.reverse()
    return chain


# ============== Queries ==============

def get_tree(db: Session) -> list[CategoryTreeNode]:
    """Active root categories with their active descendants, ordered by position."""
    categories = (
        db.query(Category)
        .filter(Category.active.is_(True))
        .order_by(Category.position, Category.id)
        .all()
    )

    children_by_parent = defaultdict(list)
    for category in categories:
        children_by_parent[category.parent_id].append(category)

    def build(category: Category, visited: frozenset) -> CategoryTreeNode:
        visited = visited | {category.id}
        return CategoryTreeNode(
            id=category.id,
            name=category.name,
            link_rewrite=category.link_rewrite,
            level_depth=category.level_depth,
            position=category.position,
            children=[
                build(child, visited)
                for child in children_by_parent.get(category.id, [])
                if child.id not in visited
            ],
        )

    # An inactive parent never appears, so its subtree is pruned with it
    return [build(root, frozenset()) for root in children_by_parent.get(None, [])]


def list_all(db: Session) -> list[CategoryResponse]:
    """Flat list of active categories ordered by depth then position."""
    categories = (
        db.query(Category)
        .filter(Category.active.is_(True))
        .order_by(Category.level_depth, Category.position, Category.id)
        .all()
    )
    return [to_response(c) for c in categories]


def find_by_slug(db: Session, slug: str) -> Category:
    category = db.query(Category).filter(Category.link_rewrite == slug).first()
    if category is None:
        raise NotFoundError(f"Category not found: {slug}")
    return category


def find_by_id(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError(f"Category not found: {category_id}")
    return category


def get_by_slug(db: Session, slug: str) -> CategoryResponse:
    category = find_by_slug(db, slug)
    return to_response(category, get_breadcrumb(db, category))


def get_by_id(db: Session, category_id: int) -> CategoryResponse:
    category = find_by_id(db, category_id)
    return to_response(category, get_breadcrumb(db, category))


def get_children(db: Session, slug: str) -> list[CategoryResponse]:
    parent = find_by_slug(db, slug)
    children = (
        db.query(Category)
        .filter(Category.parent_id == parent.id, Category.active.is_(True))
        .order_by(Category.position, Category.id)
        .all()
    )
    return [to_response(c) for c in children]


# ============== Mutations ==============

def _next_position(db: Session, parent_id: int | None) -> int:
    query = db.query(func.max(Category.position))
    if parent_id is None:
        query = query.filter(Category.parent_id.is_(None))
    else:
        query = query.filter(Category.parent_id == parent_id)
    current_max = query.scalar()
    return 0 if current_max is None else current_max + 1


def _place_under(category: Category, parent: Category | None):
    if parent is None:
        category.parent_id = None
        category.level_depth = 0
        category.is_root_category = True
    else:
        category.parent_id = parent.id
        category.level_depth = parent.level_depth + 1
        category.is_root_category = False


def _is_ancestor(db: Session, candidate_id: int, category: Category) -> bool:
    """True when ``candidate_id`` is ``category`` or one of its ancestors."""
    seen = set()
    current = category
    while current is not None and current.id not in seen:
        if current.id == candidate_id:
            return True
        seen.add(current.id)
        current = db.get(Category, current.parent_id) if current.parent_id is not None else None
    return False


def _refresh_descendant_depths(db: Session, category: Category):
    """Re-derive level_depth for the whole subtree below ``category``."""
    pending = [category]
    seen = {category.id}
    while pending:
        parent = pending.pop()
        children = db.query(Category).filter(Category.parent_id == parent.id).all()
        for child in children:
            if child.id in seen:
                continue
            seen.add(child.id)
            child.level_depth = parent.level_depth + 1
            pending.append(child)


def create(db: Session, data: CategoryCreate) -> CategoryResponse:
    parent = find_by_id(db, data.parent_id) if data.parent_id is not None else None

    with transaction(db):
        category = Category(
            name=data.name,
            description=data.description,
            active=data.active,
            meta_title=data.meta_title,
            meta_description=data.meta_description,
        )
        category.link_rewrite = unique_slug(db, Category, data.link_rewrite or data.name)
        _place_under(category, parent)
        category.position = (
            data.position if data.position is not None else _next_position(db, category.parent_id)
        )
        db.add(category)

    db.refresh(category)
    logger.info(f"Created category {category.id} '{category.link_rewrite}'")
    return to_response(category, get_breadcrumb(db, category))


def update(db: Session, category_id: int, data: CategoryUpdate) -> CategoryResponse:
    category = find_by_id(db, category_id)
    changes = data.model_dump(exclude_unset=True)

    with transaction(db):
        if "link_rewrite" in changes and changes["link_rewrite"] is not None:
            slug = slugify(changes["link_rewrite"])
            if not slug:
                raise ValidationError("Slug must not be empty")
            if slug_exists(db, Category, slug, exclude_id=category.id):
                raise ValidationError(f"Slug already in use: {slug}")
            category.link_rewrite = slug

        if "parent_id" in changes:
            parent_id = changes["parent_id"]
            old_depth = category.level_depth
            if parent_id is None:
                _place_under(category, None)
            else:
                parent = find_by_id(db, parent_id)
                if _is_ancestor(db, category.id, parent):
                    raise ValidationError("A category cannot be moved below itself")
                _place_under(category, parent)
            if category.level_depth != old_depth:
                _refresh_descendant_depths(db, category)

        for field in ("name", "description", "position", "active", "meta_title", "meta_description"):
            value = changes.get(field)
            if value is not None:
                setattr(category, field, value)

    db.refresh(category)
    logger.info(f"Updated category {category.id}")
    return to_response(category, get_breadcrumb(db, category))


def delete(db: Session, category_id: int):
    """Delete a leaf category that no product references."""
    category = find_by_id(db, category_id)

    if db.query(Category.id).filter(Category.parent_id == category.id).first():
        raise ConflictError("Cannot delete category with subcategories")

    linked = db.query(category_products.c.product_id).filter(
        category_products.c.category_id == category.id
    ).first()
    default_for = db.query(Product.id).filter(Product.default_category_id == category.id).first()
    if linked or default_for:
        raise ConflictError("Cannot delete category with products")

    with transaction(db):
        db.delete(category)
    logger.info(f"Deleted category {category_id}")
