# src/products_api/config/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from products_api.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="products-api",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="products-images",
        description="S3 bucket for product images"
    )

    public_base_url: Optional[str] = Field(
        default=None,
        alias="PUBLIC_BASE_URL",
        description="Base URL for public object links (CDN or custom domain)"
    )

    s3_public_acl: bool = Field(
        default=True,
        description="Upload objects with a public-read ACL; disable for buckets with ACLs turned off"
    )

    # Document store
    document_store: Optional[str] = Field(
        default=None,
        description="Document store backend: sqlite or mongo"
    )

    sqlite_db_path: str = Field(
        default="products.db",
        description="SQLite database file for the local document store"
    )

    mongodb_uri: Optional[str] = Field(
        default=None,
        alias="MONGODB_URI",
        description="MongoDB connection string, including credentials"
    )

    mongodb_database: Optional[str] = Field(
        default=None,
        description="MongoDB database name (defaults to the one in the URI)"
    )

    # Products
    products_collection: str = Field(
        default="products",
        description="Collection and storage folder for products"
    )

    max_image_size_kb: int = Field(
        default=2048,
        description="Maximum size of one uploaded image in kilobytes"
    )

    # HTTP
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed by the CORS middleware"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode', mode='before')
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local-mock": "local-dev",
                "cloud": "aws-prod",
            }
            return mode_mapping.get(v, v)
        return v

    @field_validator('deployment_mode')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "aws-mock", "aws-prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator('aws_endpoint_url')
    @classmethod
    def set_endpoint_url_based_on_mode(cls, v, info: ValidationInfo):
        """Auto-set endpoint URL based on deployment mode if not explicitly provided."""
        if v is None and info.data.get('deployment_mode') in ["local-dev", "aws-mock"]:
            return "http://localhost:5000"
        return v

    @field_validator('aws_access_key_id', 'aws_secret_access_key')
    @classmethod
    def set_mock_credentials_for_local_modes(cls, v, info: ValidationInfo):
        """Auto-set mock credentials for local modes if not provided."""
        if v is None and info.data.get('deployment_mode') in ["local-dev", "aws-mock"]:
            return "mock"
        # In production, None lets the execution role handle auth
        return v

    @field_validator('document_store')
    @classmethod
    def default_document_store_for_mode(cls, v, info: ValidationInfo):
        """Use SQLite locally and MongoDB everywhere else unless set explicitly."""
        if v is None:
            return "sqlite" if info.data.get('deployment_mode') == "local-dev" else "mongo"
        if v not in ("sqlite", "mongo"):
            raise ValueError(f"Invalid document_store: {v}. Must be one of ['sqlite', 'mongo']")
        return v

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_kb * 1024

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=(".env", ".env.local-dev", ".env.aws-mock", ".env.aws-prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        validate_default=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
