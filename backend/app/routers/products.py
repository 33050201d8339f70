"""Storefront product endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import ApiResponse, Page, ok
from app.schemas.image import ImageResponse
from app.schemas.product import ProductListItem, ProductDetail, VariantResponse
from app.services import products as product_service
from app.services.images import ImageService
from app.services.pagination import PageRequest, page_params
from app.services.storage import get_storage

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ApiResponse[Page[ProductListItem]])
def list_products(page: PageRequest = Depends(page_params), db: Session = Depends(get_db)):
    """Active, visible products (default sort: newest first)."""
    return ok(product_service.list_active(db, page))


@router.get("/search", response_model=ApiResponse[Page[ProductListItem]])
def search_products(
    q: str = Query(..., description="Matched against name, description and reference"),
    page: PageRequest = Depends(page_params),
    db: Session = Depends(get_db)
):
    return ok(product_service.search(db, q, page))


@router.get("/{slug}", response_model=ApiResponse[ProductDetail])
def get_product(slug: str, db: Session = Depends(get_db)):
    """Product page: images, variants, categories and sale price."""
    return ok(product_service.get_by_slug(db, slug))


@router.get("/{slug}/variants", response_model=ApiResponse[list[VariantResponse]])
def product_variants(slug: str, db: Session = Depends(get_db)):
    product = product_service.find_by_slug(db, slug)
    return ok(product_service.list_variants(db, product.id))


@router.get("/{slug}/images", response_model=ApiResponse[list[ImageResponse]])
def product_images(slug: str, db: Session = Depends(get_db), storage=Depends(get_storage)):
    product = product_service.find_by_slug(db, slug)
    return ok(ImageService(db, storage).list_images(product.id))
