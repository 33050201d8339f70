"""Admin-triggered image migrations."""
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import ValidationError
from app.routers.auth import require_admin
from app.schemas.common import ApiResponse, ok
from app.schemas.migration import LegacyPathResponse, LegacyMigrationResult, S3MigrationResult
from app.services.images import ImageService
from app.services.legacy_migration import LegacyImageMigration
from app.services.s3_migration import migrate_local_images_to_s3
from app.services.storage import get_storage, get_s3_storage, local_storage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/migration",
    tags=["admin-migration"],
    dependencies=[Depends(require_admin)],
)


@router.get("/legacy-path", response_model=ApiResponse[LegacyPathResponse])
def legacy_path(db: Session = Depends(get_db), storage=Depends(get_storage)):
    """Legacy base directory the migration would use."""
    path = LegacyImageMigration(db, ImageService(db, storage)).resolve_legacy_path()
    return ok(LegacyPathResponse(path=path, configured=path is not None))


@router.post("/legacy-images", response_model=ApiResponse[LegacyMigrationResult])
def migrate_legacy_images(
    path: str | None = Query(None, description="Legacy base directory; resolved from settings when omitted"),
    db: Session = Depends(get_db),
    storage=Depends(get_storage)
):
    """Import images from a legacy fixtures or image directory."""
    migration = LegacyImageMigration(db, ImageService(db, storage))
    base = path if path and path.strip() else migration.resolve_legacy_path()
    if not base or not Path(base).is_dir():
        raise ValidationError("Legacy path not found")

    counts = migration.migrate(base)
    message = f"Migrated {counts['migrated']} images"
    logger.info(f"Legacy image migration from {base}: {counts}")
    return ok(LegacyMigrationResult(**counts, path=base, message=message), message)


@router.post("/images-to-s3", response_model=ApiResponse[S3MigrationResult])
def migrate_images_to_s3(db: Session = Depends(get_db), s3=Depends(get_s3_storage)):
    """Upload every locally stored image to S3 and record its key and URL."""
    result = migrate_local_images_to_s3(db, local_storage(), s3)
    message = (
        f"Migration completed: {result['success']} success, "
        f"{result['failed']} failed, {result['skipped']} skipped"
    )
    return ok(S3MigrationResult(**result, message=message), message)
