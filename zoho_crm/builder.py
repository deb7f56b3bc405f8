"""
Builder module for creating API clients from saved settings.

This module provides the build_client function that turns client
settings into a V1 or V2 client ready to use.
"""

from typing import Any

from .core import ApiVersion, ClientSettings, ConfigError, load_client_settings
from .v1 import Client as V1Client
from .v2 import Client as V2Client
from .v2 import FileStore


def build_client(settings: ClientSettings, profile: str = "default") -> Any:
    """
    Create a client from settings.

    The access token of a V2 client is kept in the token file of the profile.

    Args:
        settings: Connection settings
        profile: Name of the profile the settings belong to

    Returns:
        A V1 or V2 client

    Raises:
        ConfigError: If a credential required by the API version is missing

    Example:
        >>> client = build_client(ClientSettings(ApiVersion.V1, auth_token="token123"))
        >>> contacts = client.contacts.all().get()
        >>> client.close()
    """
    if settings.api_version == ApiVersion.V1:
        if not settings.auth_token:
            raise ConfigError("An auth token is required for the V1 API.")

        return V1Client(
            settings.auth_token,
            endpoint=settings.endpoint,
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )

    missing = [
        name
        for name in ("client_id", "client_secret", "refresh_token")
        if not getattr(settings, name)
    ]
    if missing:
        raise ConfigError(f"Missing OAuth settings for the V2 API: {', '.join(missing)}")

    return V2Client(
        settings.client_id,
        settings.client_secret,
        settings.refresh_token,
        token_store=FileStore(profile),
        endpoint=settings.endpoint,
        timeout_seconds=settings.timeout_seconds,
        max_retries=settings.max_retries,
    )


def build_client_for_profile(profile: str) -> Any:
    """
    Create a client from the saved settings of a profile.

    Raises:
        ConfigError: If the profile is not configured
    """
    try:
        settings = load_client_settings(profile)
    except ConfigError as e:
        raise ConfigError(
            f"Profile '{profile}' is not configured. "
            f"Run 'zoho-crm configure --profile {profile}' first."
        ) from e

    return build_client(settings, profile)
