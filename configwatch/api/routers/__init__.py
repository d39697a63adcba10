"""API router factory functions."""
from .namespaces import create_namespaces_router
from .systems import create_systems_router

__all__ = [
    "create_namespaces_router",
    "create_systems_router",
]
