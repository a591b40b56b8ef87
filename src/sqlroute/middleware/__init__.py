"""Request/response middleware."""

from sqlroute.middleware.cors import CORSConfig, CORSMiddleware
from sqlroute.middleware.protocol import Middleware, Next

__all__ = ["CORSConfig", "CORSMiddleware", "Middleware", "Next"]
