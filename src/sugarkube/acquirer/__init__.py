"""Acquirers fetch kapp sources into local directories."""

from .base import (
    SOURCE_FIELDS,
    Acquirer,
    available_acquirers,
    default_source_name,
    new_acquirer,
    register_acquirer,
)
from .git import GitAcquirer

register_acquirer(GitAcquirer.type_name, GitAcquirer)

__all__ = [
    "SOURCE_FIELDS",
    "Acquirer",
    "GitAcquirer",
    "available_acquirers",
    "default_source_name",
    "new_acquirer",
    "register_acquirer",
]
