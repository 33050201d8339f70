"""Admin product management: CRUD, bulk operations, variants, images, specific prices."""
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.auth import require_admin
from app.schemas.common import ApiResponse, Page, ok
from app.schemas.image import ImageResponse, ImagePositions
from app.schemas.product import (
    ProductListItem, ProductDetail, ProductCreate, ProductUpdate,
    VariantResponse, VariantCreate, SpecificPriceCreate, SpecificPriceResponse,
)
from app.services import products as product_service
from app.services.images import ImageService
from app.services.pagination import PageRequest, page_params
from app.services.storage import get_storage, optional_s3_storage

router = APIRouter(
    prefix="/admin/products",
    tags=["admin-products"],
    dependencies=[Depends(require_admin)],
)


def get_image_service(
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    remote=Depends(optional_s3_storage)
) -> ImageService:
    return ImageService(db, storage, remote=remote)


# ============== Products ==============

@router.get("", response_model=ApiResponse[Page[ProductListItem]])
def list_products(page: PageRequest = Depends(page_params), db: Session = Depends(get_db)):
    """All products, inactive included (default sort: last updated first)."""
    return ok(product_service.list_all(db, page))


@router.patch("/bulk/status", response_model=ApiResponse[int])
def bulk_update_status(
    ids: list[int] = Query(...),
    active: bool = Query(...),
    db: Session = Depends(get_db)
):
    """Activate or deactivate several products; unknown ids are skipped."""
    updated = product_service.bulk_update_status(db, ids, active)
    return ok(updated, f"{updated} products updated")


@router.delete("/bulk", response_model=ApiResponse[int])
def bulk_delete(
    ids: list[int] = Query(...),
    db: Session = Depends(get_db),
    images: ImageService = Depends(get_image_service)
):
    deleted = product_service.bulk_delete(db, ids, images)
    return ok(deleted, f"{deleted} products deleted")


@router.delete("/images/{image_id}", response_model=ApiResponse[None])
def delete_image(image_id: int, images: ImageService = Depends(get_image_service)):
    """Delete an image; the next image by position becomes cover if needed."""
    images.delete(image_id)
    return ok(message="Image deleted")


@router.patch("/images/{image_id}/cover", response_model=ApiResponse[ImageResponse])
def set_cover_image(image_id: int, images: ImageService = Depends(get_image_service)):
    return ok(images.set_cover(image_id), "Cover image updated")


@router.get("/{product_id}", response_model=ApiResponse[ProductDetail])
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ok(product_service.get_by_id(db, product_id))


@router.post("", status_code=201, response_model=ApiResponse[ProductDetail])
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    return ok(product_service.create(db, data), "Product created")


@router.put("/{product_id}", response_model=ApiResponse[ProductDetail])
def update_product(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    """Partial update: only fields sent with a value are changed."""
    return ok(product_service.update(db, product_id, data), "Product updated")


@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    images: ImageService = Depends(get_image_service)
):
    product_service.delete(db, product_id, images)
    return ok(message="Product deleted")


# ============== Variants ==============

@router.get("/{product_id}/variants", response_model=ApiResponse[list[VariantResponse]])
def list_variants(product_id: int, db: Session = Depends(get_db)):
    return ok(product_service.list_variants(db, product_id))


@router.post("/{product_id}/variants", status_code=201, response_model=ApiResponse[VariantResponse])
def add_variant(product_id: int, data: VariantCreate, db: Session = Depends(get_db)):
    return ok(product_service.add_variant(db, product_id, data), "Variant added")


@router.delete("/{product_id}/variants/{variant_id}", response_model=ApiResponse[None])
def delete_variant(product_id: int, variant_id: int, db: Session = Depends(get_db)):
    product_service.delete_variant(db, product_id, variant_id)
    return ok(message="Variant deleted")


# ============== Images ==============

@router.get("/{product_id}/images", response_model=ApiResponse[list[ImageResponse]])
def list_images(product_id: int, images: ImageService = Depends(get_image_service)):
    return ok(images.list_images(product_id))


@router.post("/{product_id}/images", status_code=201, response_model=ApiResponse[ImageResponse])
def upload_image(
    product_id: int,
    file: UploadFile = File(...),
    legend: str | None = Form(None),
    cover: bool = Form(False),
    images: ImageService = Depends(get_image_service)
):
    """
    Upload an image (multipart ``file``).

    The first image of a product always becomes its cover.
    """
    data = file.file.read()
    image = images.upload(product_id, data, file.filename, file.content_type, legend, cover)
    return ok(image, "Image uploaded")


@router.put("/{product_id}/images/positions", response_model=ApiResponse[list[ImageResponse]])
def update_image_positions(
    product_id: int,
    data: ImagePositions,
    images: ImageService = Depends(get_image_service)
):
    return ok(images.update_positions(product_id, data.image_ids), "Image order updated")


# ============== Specific prices ==============

@router.get("/{product_id}/specific-prices", response_model=ApiResponse[list[SpecificPriceResponse]])
def list_specific_prices(product_id: int, db: Session = Depends(get_db)):
    return ok(product_service.list_specific_prices(db, product_id))


@router.post(
    "/{product_id}/specific-prices",
    status_code=201,
    response_model=ApiResponse[SpecificPriceResponse]
)
def add_specific_price(product_id: int, data: SpecificPriceCreate, db: Session = Depends(get_db)):
    return ok(product_service.add_specific_price(db, product_id, data), "Specific price added")
