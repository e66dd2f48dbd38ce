"""Repository checkout and source discovery module."""

from repolens.code.checkout import (
    Checkout,
    CheckoutError,
    RepositoryCloner,
    RepositoryTooLargeError,
    RepositoryUnavailableError,
)
from repolens.code.discovery import CodeFile, FileDiscovery

__all__ = [
    "Checkout",
    "CheckoutError",
    "RepositoryCloner",
    "RepositoryTooLargeError",
    "RepositoryUnavailableError",
    "CodeFile",
    "FileDiscovery",
]
