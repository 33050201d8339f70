from app.schemas.common import CamelModel


class LegacyPathResponse(CamelModel):
    path: str | None = None
    configured: bool


class LegacyMigrationResult(CamelModel):
    migrated: int = 0
    skipped: int = 0
    failed: int = 0
    path: str | None = None
    message: str | None = None


class S3MigrationResult(CamelModel):
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    message: str | None = None
