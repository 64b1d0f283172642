"""Tagged failure values returned by Apiary services.

Services never raise for expected business outcomes (a missing hive, a queen
that is already installed, a caller who does not own the hive).  They return
either the successful value or a ``Failure`` carrying one of a closed set of
``FailureKind`` tags.  The HTTP layer maps the tag to a status code; it never
inspects the human-readable message.

Usage:
    result = await coordinator.assign(subject_id, hive_id, queen_id)
    if isinstance(result, Failure):
        ...  # result.kind decides the response
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TypeVar, Union

T = TypeVar("T")


class FailureKind(str, enum.Enum):
    """Every way an Apiary operation can fail without it being a bug."""

    VALIDATION = "validation"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    AUTH = "auth"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    NOT_ACCEPTABLE = "not_acceptable"
    METHOD_NOT_ALLOWED = "method_not_allowed"


@dataclass(frozen=True)
class Failure:
    """A failed operation: what kind of failure, and a message for the caller."""

    kind: FailureKind
    message: str


# Result alias used in service signatures: ``Result[Hive]`` is ``Hive | Failure``
Result = Union[T, Failure]


def validation_error(message: str) -> Failure:
    return Failure(FailureKind.VALIDATION, message)


def not_found(message: str) -> Failure:
    return Failure(FailureKind.NOT_FOUND, message)


def forbidden(message: str) -> Failure:
    return Failure(FailureKind.FORBIDDEN, message)


def conflict(message: str) -> Failure:
    return Failure(FailureKind.CONFLICT, message)


def auth_error(message: str) -> Failure:
    return Failure(FailureKind.AUTH, message)
