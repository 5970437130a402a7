"""Middleware components for request processing.

Request logging with request-id propagation, and permissive CORS headers.
"""

from .cors import CORS_HEADERS, cors_middleware
from .request_logging import get_request_id, request_logging_middleware

__all__ = ["CORS_HEADERS", "cors_middleware", "get_request_id", "request_logging_middleware"]
