"""HTTP API."""

from .app import create_app
from .auth import HeaderAuthProvider
from .container import ServiceContainer, get_services

__all__ = ["create_app", "HeaderAuthProvider", "ServiceContainer", "get_services"]
