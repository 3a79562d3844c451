"""HTTP read path: access gate, query service and the FastAPI app."""

from .auth import AccessGate, AccessToken, extract_token
from .query import QueryService
from .app import create_app

__all__ = ["AccessGate", "AccessToken", "extract_token", "QueryService", "create_app"]
