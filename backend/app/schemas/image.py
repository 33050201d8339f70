from pydantic import Field
from app.schemas.common import CamelModel


class ImageResponse(CamelModel):
    id: int
    product_id: int
    url: str
    position: int
    cover: bool
    legend: str | None = None
    filename: str
    original_filename: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class ImagePositions(CamelModel):
    image_ids: list[int] = Field(default_factory=list)
