"""Request and response schemas for the Apiary REST API.

Attribute names on the wire are camelCase (``structureType``, ``colonySize``,
``firstName``); the Python side uses snake_case column names, bridged with
pydantic aliases.  Every entity representation carries a ``self`` link, and a
hive/queen that is part of an assignment links to its partner.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Path, Request
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from apiary.db.models import Beekeeper, Hive, Queen

_ALIASED = ConfigDict(populate_by_name=True, extra="ignore")

# Largest value an INTEGER column holds; no stored id or count exceeds it
MAX_ID = 2**31 - 1

HiveId = Annotated[int, Path(ge=1, le=MAX_ID, description="Hive identifier")]
QueenId = Annotated[int, Path(ge=1, le=MAX_ID, description="Queen identifier")]


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class HiveCreate(BaseModel):
    """Body for POST /hives and PUT /hives/{id} - every attribute required."""

    model_config = _ALIASED

    name: StrictStr
    structure_type: StrictStr = Field(alias="structureType")
    colony_size: StrictInt = Field(alias="colonySize", ge=0, le=MAX_ID)


class HivePatch(BaseModel):
    """Body for PATCH /hives/{id} - any subset of attributes."""

    model_config = _ALIASED

    name: StrictStr | None = None
    structure_type: StrictStr | None = Field(default=None, alias="structureType")
    colony_size: StrictInt | None = Field(default=None, alias="colonySize", ge=0, le=MAX_ID)


class QueenCreate(BaseModel):
    """Body for POST /queens and PUT /queens/{id}."""

    model_config = _ALIASED

    name: StrictStr
    species: StrictStr
    age: StrictInt = Field(ge=0, le=MAX_ID)


class QueenPatch(BaseModel):
    model_config = _ALIASED

    name: StrictStr | None = None
    species: StrictStr | None = None
    age: StrictInt | None = Field(default=None, ge=0, le=MAX_ID)


class BeekeeperCreate(BaseModel):
    """Body for POST /users - the profile names from the identity provider."""

    model_config = _ALIASED

    first_name: StrictStr = Field(alias="firstName")
    last_name: StrictStr = Field(alias="lastName")


def changes_from(patch: BaseModel) -> dict[str, object]:
    """Attributes the caller actually sent in a PATCH body, keyed by column name."""
    return patch.model_dump(exclude_unset=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class RelatedLink(BaseModel):
    """Reference to the partner entity of an assignment."""

    model_config = _ALIASED

    id: int
    self_link: str = Field(alias="self")


class HiveResponse(BaseModel):
    model_config = _ALIASED

    id: int
    name: str
    structure_type: str = Field(alias="structureType")
    colony_size: int = Field(alias="colonySize")
    owner: str
    queen: RelatedLink | None
    self_link: str = Field(alias="self")


class QueenResponse(BaseModel):
    model_config = _ALIASED

    id: int
    name: str
    species: str
    age: int
    hive: RelatedLink | None
    self_link: str = Field(alias="self")


class BeekeeperResponse(BaseModel):
    model_config = _ALIASED

    id: int
    subject_id: str = Field(alias="subjectId")
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")


def hive_response(hive: Hive, request: Request) -> HiveResponse:
    queen = None
    if hive.queen_id is not None:
        queen = RelatedLink(
            id=hive.queen_id,
            self_link=str(request.url_for("get_queen", queen_id=hive.queen_id)),
        )
    return HiveResponse(
        id=hive.id,
        name=hive.name,
        structure_type=hive.structure_type,
        colony_size=hive.colony_size,
        owner=hive.owner_id,
        queen=queen,
        self_link=str(request.url_for("get_hive", hive_id=hive.id)),
    )


def queen_response(queen: Queen, request: Request) -> QueenResponse:
    hive = None
    if queen.hive_id is not None:
        hive = RelatedLink(
            id=queen.hive_id,
            self_link=str(request.url_for("get_hive", hive_id=queen.hive_id)),
        )
    return QueenResponse(
        id=queen.id,
        name=queen.name,
        species=queen.species,
        age=queen.age,
        hive=hive,
        self_link=str(request.url_for("get_queen", queen_id=queen.id)),
    )


def beekeeper_response(beekeeper: Beekeeper) -> BeekeeperResponse:
    return BeekeeperResponse(
        id=beekeeper.id,
        subject_id=beekeeper.subject_id,
        first_name=beekeeper.first_name,
        last_name=beekeeper.last_name,
    )


def dump(model: BaseModel) -> dict:
    """Wire form of a response model (aliases applied)."""
    return model.model_dump(mode="json", by_alias=True)
