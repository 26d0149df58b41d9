# src/file_manager_api/config/settings.py
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from file_manager_api.config.settings import get_settings
        settings = get_settings()
        region = settings.s3_region
    """

    # Application Settings
    app_name: str = Field(
        default="file-manager-api",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    cors_allow_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed to call the API from a browser"
    )

    # S3 Core Settings
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        alias="S3_ENDPOINT_URL",
        description="Endpoint of an S3-compatible store; unset means AWS"
    )

    s3_region: str = Field(
        default="us-east-1",
        alias="S3_REGION"
    )

    s3_access_key_id: Optional[str] = Field(
        default=None,
        alias="S3_ACCESS_KEY_ID"
    )

    s3_secret_access_key: Optional[str] = Field(
        default=None,
        alias="S3_SECRET_ACCESS_KEY"
    )

    s3_force_path_style: bool = Field(
        default=False,
        alias="S3_FORCE_PATH_STYLE",
        description="Use path-style addressing (MinIO, R2, Ceph)"
    )

    s3_allowed_buckets: str = Field(
        default="",
        alias="S3_ALLOWED_BUCKETS",
        description="Comma separated bucket allow-list; empty allows all buckets"
    )

    # Transfer Configuration
    presigned_url_expiry: int = Field(
        default=3600,
        gt=0,
        description="Presigned URL lifetime in seconds"
    )

    preview_max_bytes: int = Field(
        default=1024 * 1024,
        gt=0,
        description="Largest object returned by the content preview endpoint"
    )

    # Authentication
    auth_secret_key: Optional[str] = Field(
        default=None,
        alias="AUTH_SECRET_KEY",
        description="Shared secret used to verify bearer tokens"
    )

    auth_algorithm: str = Field(
        default="HS256",
        alias="AUTH_ALGORITHM"
    )

    auth_audience: Optional[str] = Field(
        default=None,
        alias="AUTH_AUDIENCE"
    )

    auth_issuer: Optional[str] = Field(
        default=None,
        alias="AUTH_ISSUER"
    )

    auth_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        description="Lifetime of tokens minted by the CLI (7 days)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "aws-mock", "aws-prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator('s3_endpoint_url', 'auth_audience', 'auth_issuer', mode='before')
    @classmethod
    def blank_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def allowed_buckets(self) -> Optional[List[str]]:
        """Bucket allow-list, or None when every bucket is allowed."""
        if not self.s3_allowed_buckets.strip():
            return None
        return [b.strip() for b in self.s3_allowed_buckets.split(",") if b.strip()]

    def is_bucket_allowed(self, bucket_name: str) -> bool:
        allowed = self.allowed_buckets
        return allowed is None or bucket_name in allowed

    def get_environment_dict(self) -> dict:
        """Get configuration as a dictionary suitable for docker-compose or subprocess.

        Secrets are left out.
        """
        return {
            'DEPLOYMENT_MODE': self.deployment_mode,
            'S3_ENDPOINT_URL': self.s3_endpoint_url or '',
            'S3_REGION': self.s3_region,
            'S3_FORCE_PATH_STYLE': str(self.s3_force_path_style).lower(),
            'S3_ALLOWED_BUCKETS': self.s3_allowed_buckets,
            'PRESIGNED_URL_EXPIRY': str(self.presigned_url_expiry),
            'LOG_LEVEL': self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
