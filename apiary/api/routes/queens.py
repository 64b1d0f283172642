"""Queen REST endpoints for the Apiary API.

Endpoints (no authentication - queens are global records):
- POST   /queens             - create a queen (201 + self link)
- GET    /queens             - list all queens, 5 per page
- GET    /queens/{queen_id}  - fetch one queen
- PUT    /queens/{queen_id}  - replace attributes (303 See Other)
- PATCH  /queens/{queen_id}  - update some attributes
- DELETE /queens/{queen_id}  - delete, emptying the hive that held her

Installing a queen in a hive is a hive operation
(PUT /hives/{hive_id}/queens/{queen_id}) and requires owning the hive.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from apiary.api.errors import unwrap
from apiary.api.negotiation import json_body, method_not_allowed, parse_body, require_json_accept
from apiary.api.schemas import (
    QueenCreate,
    QueenId,
    QueenPatch,
    QueenResponse,
    changes_from,
    dump,
    queen_response,
)
from apiary.db.session import get_async_session
from apiary.services.assignment import AssignmentCoordinator
from apiary.services.queens import QueenService

queens_router = APIRouter(prefix="/queens", tags=["queens"])

Session = Annotated[AsyncSession, Depends(get_async_session)]
JsonBody = Annotated[dict[str, Any], Depends(json_body)]


@queens_router.post(
    "",
    status_code=201,
    response_model=QueenResponse,
    operation_id="create_queen",
    summary="Create a queen",
    dependencies=[Depends(require_json_accept)],
)
async def create_queen(request: Request, payload: JsonBody, session: Session) -> QueenResponse:
    body = parse_body(QueenCreate, payload)
    queen = unwrap(
        await QueenService(session).create(name=body.name, species=body.species, age=body.age)
    )
    return queen_response(queen, request)


@queens_router.get(
    "",
    operation_id="list_queens",
    summary="List queens",
    description="Returns queens five at a time with the total count and a ``next`` link.",
    dependencies=[Depends(require_json_accept)],
)
async def list_queens(
    request: Request,
    session: Session,
    cursor: Annotated[str | None, Query(description="Cursor from a previous page")] = None,
) -> JSONResponse:
    listing = unwrap(
        await QueenService(session).list(
            page_size=request.app.state.settings.queen_page_size,
            cursor=cursor,
            base_url=str(request.url),
        )
    )
    content: dict[str, Any] = {
        "queens": [dump(queen_response(queen, request)) for queen in listing.items],
        "total": listing.total,
    }
    if listing.next is not None:
        content["next"] = listing.next
    return JSONResponse(content=content)


@queens_router.api_route("", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
async def queens_collection_not_allowed() -> JSONResponse:
    return method_not_allowed("/queens", ["GET", "POST"])


@queens_router.get(
    "/{queen_id}",
    response_model=QueenResponse,
    operation_id="get_queen",
    summary="Fetch a queen",
    dependencies=[Depends(require_json_accept)],
)
async def get_queen(queen_id: QueenId, request: Request, session: Session) -> QueenResponse:
    queen = unwrap(await QueenService(session).get(queen_id))
    return queen_response(queen, request)


@queens_router.put(
    "/{queen_id}",
    status_code=303,
    operation_id="replace_queen",
    summary="Replace a queen's attributes",
    description="All attributes are required. The queen stays in her hive.",
)
async def replace_queen(
    queen_id: QueenId,
    request: Request,
    payload: JsonBody,
    session: Session,
) -> JSONResponse:
    body = parse_body(QueenCreate, payload)
    queen = unwrap(
        await QueenService(session).replace(
            queen_id, name=body.name, species=body.species, age=body.age
        )
    )
    representation = queen_response(queen, request)
    return JSONResponse(
        status_code=303,
        content=dump(representation),
        headers={"Location": representation.self_link},
    )


@queens_router.patch(
    "/{queen_id}",
    response_model=QueenResponse,
    operation_id="update_queen",
    summary="Update some of a queen's attributes",
)
async def update_queen(
    queen_id: QueenId,
    request: Request,
    payload: JsonBody,
    session: Session,
) -> QueenResponse:
    changes = changes_from(parse_body(QueenPatch, payload))
    queen = unwrap(await QueenService(session).update(queen_id, changes))
    return queen_response(queen, request)


@queens_router.delete(
    "/{queen_id}",
    status_code=204,
    operation_id="delete_queen",
    summary="Delete a queen",
    description="If the queen is installed, her hive is emptied in the same transaction.",
)
async def delete_queen(queen_id: QueenId, session: Session) -> Response:
    unwrap(await AssignmentCoordinator(session).delete_queen(queen_id))
    return Response(status_code=204)


@queens_router.post("/{queen_id}", include_in_schema=False)
async def queen_post_not_allowed(queen_id: QueenId) -> JSONResponse:
    return method_not_allowed("/queens/:queen_id", ["GET", "PUT", "DELETE", "PATCH"])
