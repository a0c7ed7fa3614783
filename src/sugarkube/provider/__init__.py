"""Providers supply values and directory conventions for a backend."""

from .aws import AWS_PROVIDER_NAME, AwsProvider
from .base import (
    Provider,
    Values,
    available_providers,
    new_provider,
    register_provider,
)
from .local import LOCAL_PROVIDER_NAME, LocalProvider

register_provider(LOCAL_PROVIDER_NAME, LocalProvider)
register_provider(AWS_PROVIDER_NAME, AwsProvider)

__all__ = [
    "AwsProvider",
    "LocalProvider",
    "Provider",
    "Values",
    "available_providers",
    "new_provider",
    "register_provider",
]
