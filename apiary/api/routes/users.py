"""Beekeeper (user) REST endpoints for the Apiary API.

Endpoints:
- POST /users - register the authenticated caller as a beekeeper after their
                first login (201 when created, 200 when already registered)
- GET  /users - list every registered beekeeper (not paginated)

Beekeepers are immutable and are never deleted through the API.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from apiary.api.auth import require_subject
from apiary.api.errors import unwrap
from apiary.api.negotiation import json_body, method_not_allowed, parse_body, require_json_accept
from apiary.api.schemas import BeekeeperCreate, beekeeper_response, dump
from apiary.db.session import get_async_session
from apiary.services.beekeepers import BeekeeperService

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.post(
    "",
    operation_id="register_beekeeper",
    summary="Register the caller as a beekeeper",
    dependencies=[Depends(require_json_accept)],
)
async def register_beekeeper(
    payload: Annotated[dict[str, Any], Depends(json_body)],
    subject_id: Annotated[str, Depends(require_subject)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> JSONResponse:
    body = parse_body(BeekeeperCreate, payload)
    beekeeper, created = unwrap(
        await BeekeeperService(session).register(
            subject_id, first_name=body.first_name, last_name=body.last_name
        )
    )
    return JSONResponse(
        status_code=201 if created else 200,
        content=dump(beekeeper_response(beekeeper)),
    )


@users_router.get(
    "",
    operation_id="list_beekeepers",
    summary="List registered beekeepers",
    dependencies=[Depends(require_json_accept)],
)
async def list_beekeepers(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> JSONResponse:
    beekeepers = await BeekeeperService(session).list_all()
    return JSONResponse(content={"users": [dump(beekeeper_response(b)) for b in beekeepers]})


@users_router.api_route("", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
async def users_collection_not_allowed() -> JSONResponse:
    return method_not_allowed("/users", ["GET", "POST"])
