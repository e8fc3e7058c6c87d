from pydantic_settings import BaseSettings
from typing import Optional

from filegate.core.errors import ConfigurationError

MAX_PRESIGNED_EXPIRY = 7 * 24 * 3600


class Settings(BaseSettings):
    STORAGE_ACCESS_KEY: Optional[str] = None
    STORAGE_SECRET_KEY: Optional[str] = None
    STORAGE_BUCKET: Optional[str] = None
    STORAGE_REGION: str = "us-east-1"
    STORAGE_ENDPOINT: Optional[str] = None
    STORAGE_SECURE: bool = True

    IDENTITY_URL: Optional[str] = None
    IDENTITY_SERVICE_KEY: Optional[str] = None
    IDENTITY_TIMEOUT: float = 10.0

    MONGO_URI: Optional[str] = None
    MONGO_DB_NAME: str = "scholarship"

    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024
    PRESIGNED_EXPIRY: int = 3600
    SIGN_REQUIRE_OWNERSHIP: bool = True

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def storage_endpoint(self) -> str:
        if self.STORAGE_ENDPOINT:
            return self.STORAGE_ENDPOINT
        if self.STORAGE_REGION == "us-east-1":
            return "s3.wasabisys.com"
        return f"s3.{self.STORAGE_REGION}.wasabisys.com"

    def require_storage(self) -> None:
        if not (self.STORAGE_ACCESS_KEY and self.STORAGE_SECRET_KEY and self.STORAGE_BUCKET):
            raise ConfigurationError("Missing storage configuration")

    def require_identity(self) -> None:
        if not (self.IDENTITY_URL and self.IDENTITY_SERVICE_KEY):
            raise ConfigurationError("Missing identity provider configuration")


settings = Settings()


def get_settings() -> Settings:
    return settings
