"""FastAPI integration for JWKSmith."""

from jwksmith.integrations.fastapi.jwks_router import create_jwks_router
from jwksmith.integrations.fastapi.router import create_admin_router

__all__ = [
    "create_admin_router",
    "create_jwks_router",
]
