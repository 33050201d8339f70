"""
Local -> S3 image migration.

Uploads every image recorded without an S3 key from the local upload
directory to the bucket and stores the resulting key and URL.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import AppException
from app.models import ProductImage
from app.services.storage import image_key

logger = logging.getLogger(__name__)


def migrate_local_images_to_s3(db: Session, local, s3) -> dict:
    """
    Copy local images to ``s3``.

    Returns ``{total, success, failed, skipped}``; a missing local file is a
    skip, any upload or database error a failure.
    """
    images = (
        db.query(ProductImage)
        .filter(ProductImage.s3_key.is_(None))
        .order_by(ProductImage.id)
        .all()
    )
    logger.info(f"Starting S3 migration of {len(images)} images")

    result = {"total": len(images), "success": 0, "failed": 0, "skipped": 0}
    for image in images:
        key = image_key(image.product_id, image.filename)
        try:
            data = local.read(key)
        except AppException:
            logger.warning(f"Local file not found for image {image.id} (product {image.product_id}): {key}")
            result["skipped"] += 1
            continue

        try:
            s3.save(key, data, image.mime_type or "image/jpeg")
            image.s3_key = key
            image.s3_url = s3.public_url(key)
            db.commit()
        except (AppException, SQLAlchemyError) as e:
            db.rollback()
            logger.error(f"Failed to migrate image {image.id} for product {image.product_id}: {e}")
            result["failed"] += 1
            continue
        result["success"] += 1

    logger.info(
        f"S3 migration completed: {result['success']} success, "
        f"{result['failed']} failed, {result['skipped']} skipped"
    )
    return result
