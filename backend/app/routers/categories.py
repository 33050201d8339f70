"""Storefront category endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.category import CategoryResponse, CategoryTreeNode
from app.schemas.common import ApiResponse, Page, ok
from app.schemas.product import ProductListItem
from app.services import categories as category_service
from app.services import products as product_service
from app.services.pagination import PageRequest, page_params

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=ApiResponse[list[CategoryTreeNode]])
def category_tree(db: Session = Depends(get_db)):
    """Nested tree of active categories."""
    return ok(category_service.get_tree(db))


@router.get("/flat", response_model=ApiResponse[list[CategoryResponse]])
def flat_categories(db: Session = Depends(get_db)):
    return ok(category_service.list_all(db))


@router.get("/{slug}", response_model=ApiResponse[CategoryResponse])
def get_category(slug: str, db: Session = Depends(get_db)):
    """Category with its breadcrumb."""
    return ok(category_service.get_by_slug(db, slug))


@router.get("/{slug}/products", response_model=ApiResponse[Page[ProductListItem]])
def category_products(
    slug: str,
    page: PageRequest = Depends(page_params),
    db: Session = Depends(get_db)
):
    """Paged storefront products of a category."""
    return ok(product_service.list_by_category(db, slug, page))


@router.get("/{slug}/children", response_model=ApiResponse[list[CategoryResponse]])
def category_children(slug: str, db: Session = Depends(get_db)):
    return ok(category_service.get_children(db, slug))
