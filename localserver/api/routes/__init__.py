"""Route registration for the local control server."""

from .api_routes import register_api_routes
from .cert_routes import register_cert_routes
from .static_routes import register_static_routes

__all__ = ["register_api_routes", "register_cert_routes", "register_static_routes"]
