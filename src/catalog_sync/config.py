"""Application configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_HOST = "https://api.commercetools.com"
DEFAULT_AUTH_HOST = "https://auth.commercetools.com"

# Region identifiers accepted in CTP_REGION, mapped to (api host, auth host).
REGION_HOSTS: dict[str, tuple[str, str]] = {
    "gcp-europe-west1": (
        "https://api.europe-west1.gcp.commercetools.com",
        "https://auth.europe-west1.gcp.commercetools.com",
    ),
    "gcp-us-central1": (
        "https://api.us-central1.gcp.commercetools.com",
        "https://auth.us-central1.gcp.commercetools.com",
    ),
    "gcp-australia-southeast1": (
        "https://api.australia-southeast1.gcp.commercetools.com",
        "https://auth.australia-southeast1.gcp.commercetools.com",
    ),
    "aws-eu-central-1": (
        "https://api.eu-central-1.aws.commercetools.com",
        "https://auth.eu-central-1.aws.commercetools.com",
    ),
    "aws-us-east-2": (
        "https://api.us-east-2.aws.commercetools.com",
        "https://auth.us-east-2.aws.commercetools.com",
    ),
}
REGION_ALIASES = {
    "europe-west1": "gcp-europe-west1",
    "us-central1": "gcp-us-central1",
}


def _split_csv(v: str) -> list[str]:
    return [item.strip() for item in v.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_env: Literal["development", "staging", "production", "test"] = "development"
    service_name: str = "catalog-sync"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # API Settings
    # -------------------------------------------------------------------------
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_workers: int = 1
    http_timeout_seconds: float = 30.0
    cors_origins: str = "*"

    @property
    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins)

    # -------------------------------------------------------------------------
    # commercetools (source catalog)
    # -------------------------------------------------------------------------
    ctp_project_key: str = ""
    ctp_client_id: str = ""
    ctp_client_secret: str = ""
    ctp_scope: str = ""
    ctp_region: str = ""

    catalog_read_mode: Literal["rest", "graphql", "hybrid"] = "hybrid"
    catalog_locales: str = "en-US,en-GB,en"
    rest_page_size: int = Field(default=500, ge=1, le=500)
    graphql_page_size: int = Field(default=100, ge=1, le=500)

    @property
    def locale_preferences(self) -> list[str]:
        """Locales tried in order when resolving localized text."""
        return _split_csv(self.catalog_locales)

    @property
    def ctp_scopes(self) -> str:
        """OAuth scope requested for the client-credentials grant."""
        return self.ctp_scope or f"manage_project:{self.ctp_project_key}"

    @property
    def ctp_api_host(self) -> str:
        return self._region_hosts()[0]

    @property
    def ctp_auth_host(self) -> str:
        return self._region_hosts()[1]

    def _region_hosts(self) -> tuple[str, str]:
        region = REGION_ALIASES.get(self.ctp_region, self.ctp_region)
        return REGION_HOSTS.get(region, (DEFAULT_API_HOST, DEFAULT_AUTH_HOST))

    # -------------------------------------------------------------------------
    # Google Cloud Retail (destination catalog)
    # -------------------------------------------------------------------------
    vertex_project_id: str = ""
    vertex_location: str = "global"
    vertex_catalog_id: str = "default_catalog"
    vertex_branch_id: str = "0"
    vertex_credentials_json: str = ""
    vertex_key_file_path: str = ""
    retail_api_base_url: str = "https://retail.googleapis.com/v2"

    # Substitute call-time failures for missing credentials instead of
    # refusing to start (local development and tests only).
    allow_missing_credentials: bool = False

    @property
    def catalog_path(self) -> str:
        return (
            f"projects/{self.vertex_project_id}/locations/{self.vertex_location}"
            f"/catalogs/{self.vertex_catalog_id}"
        )

    @property
    def branch_path(self) -> str:
        return f"{self.catalog_path}/branches/{self.vertex_branch_id}"

    # -------------------------------------------------------------------------
    # Transformation
    # -------------------------------------------------------------------------
    product_base_url: str = "https://your-store.com"
    default_currency: str = "USD"
    fulfillment_place_ids: str = "store1,store2"

    @property
    def place_ids(self) -> list[str]:
        return _split_csv(self.fulfillment_place_ids)

    # -------------------------------------------------------------------------
    # Full sync and import operation polling
    # -------------------------------------------------------------------------
    full_sync_batch_size: int = Field(default=50, ge=1)
    full_sync_batch_delay_seconds: float = Field(default=1.0, ge=0)
    operation_poll_interval_seconds: float = Field(default=10.0, ge=0)
    operation_poll_max_attempts: int = Field(default=30, ge=1)
    operation_poll_backoff: float = Field(default=1.0, ge=1.0)
    operation_poll_max_interval_seconds: float = Field(default=60.0, ge=0)

    # -------------------------------------------------------------------------
    # Redis (event version guard)
    # -------------------------------------------------------------------------
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0
    event_version_guard_enabled: bool = False
    event_version_ttl_seconds: int = 7 * 24 * 3600

    @property
    def redis_url(self) -> str:
        """Construct Redis connection URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # -------------------------------------------------------------------------
    # Celery
    # -------------------------------------------------------------------------
    celery_broker_url: str = ""
    celery_result_backend: str = ""
    full_sync_schedule_minute: str = "0"
    full_sync_schedule_hour: str = "*/6"

    @property
    def celery_broker(self) -> str:
        """Get Celery broker URL, defaulting to Redis URL."""
        return self.celery_broker_url or self.redis_url

    @property
    def celery_backend(self) -> str:
        """Get Celery result backend URL, defaulting to Redis URL."""
        return self.celery_result_backend or self.redis_url

    # -------------------------------------------------------------------------
    # commercetools subscription
    # -------------------------------------------------------------------------
    subscription_key: str = "vertex-sync-subscription"
    subscription_pubsub_project_id: str = ""
    subscription_pubsub_topic: str = ""
    subscription_format: Literal["Platform", "CloudEvents"] = "Platform"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
