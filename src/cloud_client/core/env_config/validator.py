"""
Pydantic settings model for environment configuration.
"""

from typing import Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CloudSettings(BaseSettings):
    """
    Cloud Client configuration from environment variables.

    Reads from:
    1. Environment variables (OS_*)
    2. .env file
    3. Defaults

    Example .env file:
        OS_TOKEN=gAAAA...
        OS_COMPUTE_ENDPOINT=https://nova.example.com/v2.1
        OS_NETWORK_ENDPOINT=https://neutron.example.com
        OS_INTERFACE=internal
        OS_WAIT_TIMEOUT=900
        OS_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix='OS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    token: Optional[str] = Field(default=None, description="Pre-issued token")
    interface: Literal["public", "internal", "admin"] = Field(default="public")
    region_name: Optional[str] = None

    # Endpoint catalog
    compute_endpoint: Optional[str] = None
    image_endpoint: Optional[str] = None
    network_endpoint: Optional[str] = None

    # Transport
    timeout_connect: float = Field(default=5.0, gt=0)
    timeout_read: float = Field(default=30.0, gt=0)
    verify_ssl: bool = True

    # Waiting
    wait_poll_interval: float = Field(default=1.0, gt=0)
    wait_timeout: Optional[float] = Field(default=None, gt=0)
    wait_max_transient_retries: int = Field(default=3, ge=0)
    wait_backoff_factor: float = Field(default=1.0, ge=1.0)

    # Listing
    page_size: Optional[int] = Field(default=None, gt=0)

    # Logging (disabled unless OS_LOG_LEVEL is set)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_format: Literal["json", "text"] = "text"
    log_file_path: Optional[str] = None

    @field_validator('compute_endpoint', 'image_endpoint', 'network_endpoint')
    @classmethod
    def validate_endpoint(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(('http://', 'https://')):
            raise ValueError(f"endpoint must be an http(s) URL, got {v!r}")
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    def endpoint_catalog(self) -> Dict[str, str]:
        """service_type -> URL for every configured endpoint."""
        endpoints = {
            'compute': self.compute_endpoint,
            'image': self.image_endpoint,
            'network': self.network_endpoint,
        }
        return {service: url for service, url in endpoints.items() if url}
