"""Hive REST endpoints for the Apiary API.

Endpoints (all require a bearer token; a hive is only visible to its owner):
- POST   /hives                          - create a hive (201 + self link)
- GET    /hives                          - list the caller's hives, 5 per page
- GET    /hives/{hive_id}                - fetch one hive
- PUT    /hives/{hive_id}                - replace attributes (303 See Other)
- PATCH  /hives/{hive_id}                - update some attributes
- DELETE /hives/{hive_id}                - delete, detaching its queen
- PUT    /hives/{hive_id}/queens/{qid}   - install a queen
- DELETE /hives/{hive_id}/queens/{qid}   - remove the installed queen

Security:
- The owner is always the authenticated subject - never taken from the body.
- Another owner's hive returns 403; a missing hive returns 404.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from apiary.api.auth import require_subject
from apiary.api.errors import unwrap
from apiary.api.negotiation import json_body, method_not_allowed, parse_body, require_json_accept
from apiary.api.schemas import (
    HiveCreate,
    HiveId,
    HivePatch,
    HiveResponse,
    QueenId,
    changes_from,
    dump,
    hive_response,
)
from apiary.db.session import get_async_session
from apiary.services.assignment import AssignmentCoordinator
from apiary.services.hives import HiveService

hives_router = APIRouter(prefix="/hives", tags=["hives"])

Subject = Annotated[str, Depends(require_subject)]
Session = Annotated[AsyncSession, Depends(get_async_session)]
JsonBody = Annotated[dict[str, Any], Depends(json_body)]


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


@hives_router.post(
    "",
    status_code=201,
    response_model=HiveResponse,
    operation_id="create_hive",
    summary="Create a hive owned by the caller",
    dependencies=[Depends(require_json_accept)],
)
async def create_hive(
    request: Request,
    payload: JsonBody,
    subject_id: Subject,
    session: Session,
) -> HiveResponse:
    body = parse_body(HiveCreate, payload)
    hive = unwrap(
        await HiveService(session).create(
            subject_id,
            name=body.name,
            structure_type=body.structure_type,
            colony_size=body.colony_size,
        )
    )
    return hive_response(hive, request)


@hives_router.get(
    "",
    operation_id="list_hives",
    summary="List the caller's hives",
    description=(
        "Returns the caller's hives five at a time with the total count. "
        "When more hives remain, ``next`` links to the following page."
    ),
    dependencies=[Depends(require_json_accept)],
)
async def list_hives(
    request: Request,
    subject_id: Subject,
    session: Session,
    cursor: Annotated[str | None, Query(description="Cursor from a previous page")] = None,
) -> JSONResponse:
    listing = unwrap(
        await HiveService(session).list(
            subject_id,
            page_size=request.app.state.settings.hive_page_size,
            cursor=cursor,
            base_url=str(request.url),
        )
    )
    content: dict[str, Any] = {
        "hives": [dump(hive_response(hive, request)) for hive in listing.items],
        "total": listing.total,
    }
    if listing.next is not None:
        content["next"] = listing.next
    return JSONResponse(content=content)


@hives_router.api_route("", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
async def hives_collection_not_allowed() -> JSONResponse:
    return method_not_allowed("/hives", ["GET", "POST"])


# ---------------------------------------------------------------------------
# Single hive
# ---------------------------------------------------------------------------


@hives_router.get(
    "/{hive_id}",
    response_model=HiveResponse,
    operation_id="get_hive",
    summary="Fetch one of the caller's hives",
    dependencies=[Depends(require_json_accept)],
)
async def get_hive(
    hive_id: HiveId,
    request: Request,
    subject_id: Subject,
    session: Session,
) -> HiveResponse:
    hive = unwrap(await HiveService(session).get(subject_id, hive_id))
    return hive_response(hive, request)


@hives_router.put(
    "/{hive_id}",
    status_code=303,
    operation_id="replace_hive",
    summary="Replace a hive's attributes",
    description="All attributes are required. The installed queen is kept.",
)
async def replace_hive(
    hive_id: HiveId,
    request: Request,
    payload: JsonBody,
    subject_id: Subject,
    session: Session,
) -> JSONResponse:
    body = parse_body(HiveCreate, payload)
    hive = unwrap(
        await HiveService(session).replace(
            subject_id,
            hive_id,
            name=body.name,
            structure_type=body.structure_type,
            colony_size=body.colony_size,
        )
    )
    representation = hive_response(hive, request)
    return JSONResponse(
        status_code=303,
        content=dump(representation),
        headers={"Location": representation.self_link},
    )


@hives_router.patch(
    "/{hive_id}",
    response_model=HiveResponse,
    operation_id="update_hive",
    summary="Update some of a hive's attributes",
)
async def update_hive(
    hive_id: HiveId,
    request: Request,
    payload: JsonBody,
    subject_id: Subject,
    session: Session,
) -> HiveResponse:
    changes = changes_from(parse_body(HivePatch, payload))
    hive = unwrap(await HiveService(session).update(subject_id, hive_id, changes))
    return hive_response(hive, request)


@hives_router.delete(
    "/{hive_id}",
    status_code=204,
    operation_id="delete_hive",
    summary="Delete a hive",
    description="An installed queen is detached from the hive before it is deleted.",
)
async def delete_hive(hive_id: HiveId, subject_id: Subject, session: Session) -> Response:
    unwrap(await AssignmentCoordinator(session).delete_hive(subject_id, hive_id))
    return Response(status_code=204)


@hives_router.post("/{hive_id}", include_in_schema=False)
async def hive_post_not_allowed(hive_id: HiveId) -> JSONResponse:
    return method_not_allowed("/hives/:hive_id", ["GET", "PUT", "DELETE", "PATCH"])


# ---------------------------------------------------------------------------
# Queen assignment
# ---------------------------------------------------------------------------


@hives_router.put(
    "/{hive_id}/queens/{queen_id}",
    status_code=204,
    operation_id="assign_queen",
    summary="Install a queen in a hive",
    description=(
        "Fails with 403 if the queen already lives in a hive (queens are never "
        "moved implicitly) or the hive already holds a queen."
    ),
)
async def assign_queen(
    hive_id: HiveId,
    queen_id: QueenId,
    subject_id: Subject,
    session: Session,
) -> Response:
    failure = await AssignmentCoordinator(session).assign(subject_id, hive_id, queen_id)
    unwrap(failure)
    return Response(status_code=204)


@hives_router.delete(
    "/{hive_id}/queens/{queen_id}",
    status_code=204,
    operation_id="remove_queen",
    summary="Remove the queen from a hive",
)
async def remove_queen(
    hive_id: HiveId,
    queen_id: QueenId,
    subject_id: Subject,
    session: Session,
) -> Response:
    failure = await AssignmentCoordinator(session).remove(subject_id, hive_id, queen_id)
    unwrap(failure)
    return Response(status_code=204)
