"""FastAPI admin router — factory that creates key management endpoints."""

import uuid
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from jwksmith.core.errors import JWKSmithError
from jwksmith.core.keys import (
    create_key,
    get_signing_key,
    list_keys,
    soft_delete_key,
    to_response,
)
from jwksmith.core.lifecycle import KeyLifecycle
from jwksmith.core.schemas import (
    CreateKeyRequest,
    DeleteOutcome,
    SigningKeyPrivateResponse,
    SigningKeyResponse,
)
from jwksmith.events import get_collector


def _error_detail(e: JWKSmithError) -> dict:
    """Build HTTPException detail dict from a JWKSmithError."""
    detail = {"error": e.code, "message": e.message}
    if e.extra:
        detail.update(e.extra)
    return detail


def create_admin_router(
    lifecycle: KeyLifecycle,
    get_db: Callable,
    clock: Callable[[], datetime],
    *,
    dependencies: Sequence | None = None,
) -> APIRouter:
    """Create a FastAPI router with the key management endpoints.

    Args:
        lifecycle: Lifecycle rules applied to new keys.
        get_db: An async generator dependency that yields AsyncSession.
        clock: Source of the current time.
        dependencies: Extra dependencies applied to every endpoint (auth).
    """
    router = APIRouter(tags=["keys"], dependencies=list(dependencies or []))

    @router.post("/jwks", response_model=SigningKeyResponse, status_code=201)
    async def create_key_endpoint(
        data: CreateKeyRequest,
        session: Annotated[AsyncSession, Depends(get_db)],
    ):
        """Generate a new signing key for the requested algorithm."""
        try:
            record = await create_key(
                session,
                algorithm=data.alg,
                lifecycle=lifecycle,
                now=clock(),
                events=get_collector(),
            )
        except JWKSmithError as e:
            raise HTTPException(status_code=e.status_code, detail=_error_detail(e))

        return to_response(record, clock())

    @router.get("/jwks", response_model=list[SigningKeyResponse])
    async def list_keys_endpoint(
        session: Annotated[AsyncSession, Depends(get_db)],
        include_deleted: Annotated[bool, Query()] = False,
    ):
        """List keys with their current lifecycle state."""
        return await list_keys(session, include_deleted=include_deleted, now=clock())

    @router.get(
        "/jwks/{key_id}",
        response_model=SigningKeyPrivateResponse,
        responses={404: {"description": "Key not found"}, 410: {"description": "Private key expired"}},
    )
    async def get_key_endpoint(
        key_id: uuid.UUID,
        session: Annotated[AsyncSession, Depends(get_db)],
    ):
        """Get a key including its private half, while it can still sign."""
        try:
            return await get_signing_key(session, key_id, now=clock())
        except JWKSmithError as e:
            raise HTTPException(status_code=e.status_code, detail=_error_detail(e))

    @router.delete(
        "/jwks/{key_id}",
        status_code=204,
        responses={200: {"description": "Key was already deleted"}, 404: {"description": "Key not found"}},
    )
    async def delete_key_endpoint(
        key_id: uuid.UUID,
        session: Annotated[AsyncSession, Depends(get_db)],
    ):
        """Soft-delete a key. Repeating the call is harmless."""
        try:
            outcome = await soft_delete_key(session, key_id, now=clock(), events=get_collector())
        except JWKSmithError as e:
            raise HTTPException(status_code=e.status_code, detail=_error_detail(e))

        if outcome is DeleteOutcome.ALREADY_DELETED:
            return JSONResponse(
                status_code=200,
                content={"kid": str(key_id), "status": outcome.value},
            )
        return Response(status_code=204)

    return router
