"""Binary image serving (outside the JSON API prefix)."""
import logging

from fastapi import APIRouter, Depends, Response
from fastapi import HTTPException

from app.exceptions import StorageError
from app.services.images import content_type_for
from app.services.storage import get_storage, image_key, local_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])

CACHE_CONTROL = "public, max-age=86400"


@router.get("/products/{product_id}/{filename}")
def serve_product_image(product_id: int, filename: str, storage=Depends(get_storage)):
    """Stream an image from the configured storage, falling back to the local directory."""
    key = image_key(product_id, filename)
    backends = [storage] if not storage.is_remote else [storage, local_storage()]

    for backend in backends:
        try:
            data = backend.read(key)
        except StorageError as e:
            logger.debug(f"Image {key} not readable from {type(backend).__name__}: {e}")
            continue
        return Response(
            content=data,
            media_type=content_type_for(filename),
            headers={"Cache-Control": CACHE_CONTROL},
        )

    raise HTTPException(status_code=404, detail="Image not found")
