from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./catalog.db"

    # Application
    environment: str = "development"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000"  # comma separated

    # JWT Authentication
    jwt_secret_key: str = "jwt-secret-change-in-production-must-be-long-enough"
    jwt_expiration_ms: int = 86_400_000  # 24 hours

    # Image storage: "local" or "s3"
    storage_backend: str = "local"
    upload_path: str = "./uploads/images"

    # S3 (storage_backend == "s3", and the images-to-s3 migration)
    aws_s3_bucket_name: str | None = None
    aws_region: str = "us-east-1"
    aws_s3_endpoint_url: str | None = None

    # Legacy image migration
    legacy_migration_enabled: bool = True
    legacy_fixtures_path: str | None = None
    legacy_img_path: str | None = None

    # Startup seeding
    seed_on_startup: bool = True
    admin_email: str = "admin@prestashop.com"
    admin_password: str = "admin123"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
