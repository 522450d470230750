"""FastAPI JWKS router — serves public keys at /.well-known/jwks.json."""

from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from jwksmith.config import JWKSmithConfig
from jwksmith.core.jwks import build_jwk_set
from jwksmith.core.schemas import JWKSetResponse


def create_jwks_router(
    config: JWKSmithConfig, get_db: Callable, clock: Callable[[], datetime],
) -> APIRouter:
    """Create a FastAPI router serving the JWKS endpoint.

    Mount at the root (no prefix) so the endpoint is at /.well-known/jwks.json.
    """
    router = APIRouter(tags=["jwks"])

    @router.get("/.well-known/jwks.json", response_model=JWKSetResponse)
    async def jwks_endpoint(
        session: Annotated[AsyncSession, Depends(get_db)],
    ):
        """Serve all published public keys as a JWK Set (RFC 7517)."""
        jwk_set = await build_jwk_set(session, clock())
        return JSONResponse(
            content=jwk_set,
            headers={
                "Cache-Control": f"public, max-age={config.jwks_cache_max_age}",
            },
        )

    return router
