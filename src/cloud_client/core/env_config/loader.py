"""
Configuration loader from environment variables and .env files.
"""

from typing import Any, Optional

from ..config import CloudConfig, TimeoutConfig, WaitSpec
from ..logging.config import LoggingConfig
from .validator import CloudSettings


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> CloudConfig:
    """
    Load CloudConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit CloudSettings field values
    2. Environment variables (OS_*)
    3. .env file
    4. Defaults

    Args:
        env_file: Custom .env file path
        **overrides: CloudSettings fields (token, wait_timeout, ...)

    Returns:
        CloudConfig instance

    Raises:
        pydantic.ValidationError: Invalid values

    Example:
        >>> config = load_from_env()
        >>> config = load_from_env(env_file="prod.env", wait_timeout=1800)
    """
    settings_kwargs = dict(overrides)
    if env_file is not None:
        settings_kwargs['_env_file'] = env_file
    settings = CloudSettings(**settings_kwargs)

    logging_config = None
    if settings.log_level:
        logging_config = LoggingConfig.create(
            level=settings.log_level,
            format=settings.log_format,
            enable_file=settings.log_file_path is not None,
            file_path=settings.log_file_path,
            extra_fields={'region': settings.region_name} if settings.region_name else None,
        )

    return CloudConfig(
        endpoints=settings.endpoint_catalog(),
        token=settings.token,
        endpoint_interface=settings.interface,
        region_name=settings.region_name,
        timeout=TimeoutConfig(connect=settings.timeout_connect, read=settings.timeout_read),
        verify_ssl=settings.verify_ssl,
        wait=WaitSpec(
            poll_interval=settings.wait_poll_interval,
            timeout=settings.wait_timeout,
            max_transient_retries=settings.wait_max_transient_retries,
            backoff_factor=settings.wait_backoff_factor,
        ),
        page_size=settings.page_size,
        logging=logging_config,
    )
