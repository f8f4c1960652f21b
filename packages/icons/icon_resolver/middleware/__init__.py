"""Middleware package — error hierarchy and request ID."""

from icon_resolver.middleware.error_handler import (
    IconNotFoundError,
    IconResolverError,
    InvalidCollectionError,
    InvalidIconNameError,
    InvalidProviderConfigError,
    ProviderNotConfiguredError,
    register_error_handlers,
)
from icon_resolver.middleware.request_id import RequestIdMiddleware, request_id_var

__all__ = [
    "IconNotFoundError",
    "IconResolverError",
    "InvalidCollectionError",
    "InvalidIconNameError",
    "InvalidProviderConfigError",
    "ProviderNotConfiguredError",
    "RequestIdMiddleware",
    "register_error_handlers",
    "request_id_var",
]
