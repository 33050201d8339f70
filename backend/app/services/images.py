"""
Product Image Service

Uploads, deletes and orders product images and keeps the cover invariant:
a product with images has exactly one cover image, a product without images
has none.
"""
import logging
import mimetypes
import os
import uuid
from io import BytesIO

from PIL import Image, UnidentifiedImageError
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import transaction
from app.exceptions import NotFoundError, ValidationError, StorageError
from app.models import Product, ProductImage
from app.schemas.image import ImageResponse
from app.services.storage import image_key, local_storage

logger = logging.getLogger(__name__)

EXTENSION_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def content_type_for(filename: str) -> str:
    """MIME type from the file extension, JPEG when unknown."""
    ext = os.path.splitext(filename)[1].lower()
    return EXTENSION_CONTENT_TYPES.get(ext, "image/jpeg")


def generate_filename(original_filename: str | None, content_type: str | None = None) -> str:
    """Random, collision-proof file name keeping the original extension."""
    ext = os.path.splitext(original_filename or "")[1].lower()
    if not ext and content_type:
        ext = mimetypes.guess_extension(content_type) or ""
    return f"{uuid.uuid4().hex}{ext or '.jpg'}"


def is_valid_image(content: bytes) -> bool:
    """Check that Pillow can identify the bytes as an image."""
    try:
        with Image.open(BytesIO(content)) as img:
            img.verify()
        return True
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return False


def to_response(image: ProductImage) -> ImageResponse:
    return ImageResponse(
        id=image.id,
        product_id=image.product_id,
        url=image.url,
        position=image.position,
        cover=image.cover,
        legend=image.legend,
        filename=image.filename,
        original_filename=image.original_filename,
        mime_type=image.mime_type,
        file_size=image.file_size,
    )


def cover_urls(db: Session, product_ids: list[int]) -> dict[int, str]:
    """
    Listing image per product: the cover, else the lowest position image.

    Products without images are absent from the result.
    """
    if not product_ids:
        return {}
    images = (
        db.query(ProductImage)
        .filter(ProductImage.product_id.in_(product_ids))
        .order_by(ProductImage.product_id, ProductImage.cover.desc(), ProductImage.position, ProductImage.id)
        .all()
    )
    result = {}
    for image in images:
        result.setdefault(image.product_id, image.url)
    return result


class ImageService:
    """Image operations against one storage backend."""

    def __init__(self, db: Session, storage, fallback=None, remote=None):
        self.db = db
        self.storage = storage
        # Images without a remote key live on the local disk
        self.local = fallback or (local_storage() if storage.is_remote else storage)
        # Images with a remote key live in S3 whatever the default backend is
        self.remote = remote or (storage if storage.is_remote else None)

    def _get_product(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError(f"Product not found: {product_id}")
        return product

    def _get_image(self, image_id: int) -> ProductImage:
        image = self.db.get(ProductImage, image_id)
        if image is None:
            raise NotFoundError(f"Image not found: {image_id}")
        return image

    def _images_of(self, product_id: int) -> list[ProductImage]:
        return (
            self.db.query(ProductImage)
            .filter(ProductImage.product_id == product_id)
            .order_by(ProductImage.position, ProductImage.id)
            .all()
        )

    def _clear_cover(self, product_id: int, keep_id: int | None = None):
        query = self.db.query(ProductImage).filter(
            ProductImage.product_id == product_id, ProductImage.cover.is_(True)
        )
        if keep_id is not None:
            query = query.filter(ProductImage.id != keep_id)
        query.update({ProductImage.cover: False}, synchronize_session="fetch")

    def list_images(self, product_id: int) -> list[ImageResponse]:
        self._get_product(product_id)
        return [to_response(img) for img in self._images_of(product_id)]

    def store_image(
        self,
        product_id: int,
        data: bytes,
        original_filename: str | None,
        content_type: str,
        legend: str | None = None,
        cover: bool = False,
        position: int | None = None,
    ) -> ProductImage:
        """
        Persist bytes to the backend and record the image.

        ``position`` defaults to the next free slot. The first image of a
        product always becomes the cover.
        """
        filename = generate_filename(original_filename, content_type)
        key = image_key(product_id, filename)
        self.storage.save(key, data, content_type)

        try:
            with transaction(self.db):
                if position is None:
                    current_max = (
                        self.db.query(func.max(ProductImage.position))
                        .filter(ProductImage.product_id == product_id)
                        .scalar()
                    )
                    position = 0 if current_max is None else current_max + 1

                has_cover = (
                    self.db.query(ProductImage.id)
                    .filter(ProductImage.product_id == product_id, ProductImage.cover.is_(True))
                    .first()
                    is not None
                )
                make_cover = cover or position == 0 or not has_cover
                if make_cover:
                    self._clear_cover(product_id)

                image = ProductImage(
                    product_id=product_id,
                    position=position,
                    cover=make_cover,
                    legend=legend,
                    filename=filename,
                    original_filename=original_filename,
                    mime_type=content_type,
                    file_size=len(data),
                )
                if self.storage.is_remote:
                    image.s3_key = key
                    image.s3_url = self.storage.public_url(key)
                self.db.add(image)
        except Exception:
            self._discard(key)
            raise

        self.db.refresh(image)
        return image

    def upload(
        self,
        product_id: int,
        data: bytes,
        original_filename: str | None,
        content_type: str | None,
        legend: str | None = None,
        cover: bool = False,
    ) -> ImageResponse:
        self._get_product(product_id)

        if not data:
            raise ValidationError("File is empty")
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("File must be an image")
        if not is_valid_image(data):
            raise ValidationError("File is not a readable image")

        image = self.store_image(product_id, data, original_filename, content_type, legend, cover)
        logger.info(f"Uploaded image {image.id} for product {product_id} (cover={image.cover})")
        return to_response(image)

    def _discard(self, key: str):
        try:
            self.storage.delete(key)
        except StorageError as e:
            logger.error(f"Failed to clean up {key}: {e}")

    def remove_file(self, image: ProductImage):
        """Delete the backing file; failures are logged, never raised."""
        try:
            if image.s3_key and self.remote is not None:
                self.remote.delete(image.s3_key)
            elif image.s3_key:
                logger.warning(f"No S3 storage configured, cannot delete {image.s3_key} of image {image.id}")
                self.local.delete(image_key(image.product_id, image.filename))
            else:
                self.local.delete(image_key(image.product_id, image.filename))
        except StorageError as e:
            logger.error(f"Failed to delete file for image {image.id}: {e}")

    def delete(self, image_id: int):
        image = self._get_image(image_id)
        product_id = image.product_id
        was_cover = image.cover

        self.remove_file(image)

        with transaction(self.db):
            self.db.delete(image)
            self.db.flush()
            if was_cover:
                successor = (
                    self.db.query(ProductImage)
                    .filter(ProductImage.product_id == product_id)
                    .order_by(ProductImage.position, ProductImage.id)
                    .first()
                )
                if successor is not None:
                    successor.cover = True
        logger.info(f"Deleted image {image_id} of product {product_id}")

    def set_cover(self, image_id: int) -> ImageResponse:
        image = self._get_image(image_id)
        with transaction(self.db):
            self._clear_cover(image.product_id, keep_id=image.id)
            image.cover = True
        self.db.refresh(image)
        return to_response(image)

    def update_positions(self, product_id: int, image_ids: list[int]) -> list[ImageResponse]:
        """Renumber positions 0..n-1 in the given order; foreign or unknown ids are ignored."""
        self._get_product(product_id)
        images = {img.id: img for img in self._images_of(product_id)}
        with transaction(self.db):
            position = 0
            for image_id in image_ids:
                image = images.get(image_id)
                if image is None:
                    continue
                image.position = position
                position += 1
        return [to_response(img) for img in self._images_of(product_id)]
