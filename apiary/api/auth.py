"""Bearer authentication dependency for the Apiary REST API.

The ``require_subject`` FastAPI dependency:
1. Reads the ``Authorization: Bearer <token>`` header.
2. Passes the token to the ``IdentityVerifier`` built at startup
   (``app.state.identity_verifier``).
3. Returns the verified subject identifier, which routes use as the owner of
   hives.

Failures:
- header absent or not a bearer credential -> 401 "missing credential"
- any verification failure                 -> 401 "invalid credential"

Every request is verified again; nothing is cached and nothing is retried.
Tests swap the verifier by overriding ``get_identity_verifier``.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from apiary.api.errors import ApiError
from apiary.identity import IdentityError, IdentityVerifier
from apiary.results import auth_error

logger = logging.getLogger(__name__)

# auto_error=False so a missing header produces our own 401 body instead of
# FastAPI's default 403.
BEARER = HTTPBearer(auto_error=False)

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def get_identity_verifier(request: Request) -> IdentityVerifier:
    """FastAPI dependency returning the verifier configured at startup."""
    return request.app.state.identity_verifier


async def require_subject(
    credentials: HTTPAuthorizationCredentials | None = Security(BEARER),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> str:
    """FastAPI dependency that authenticates the caller.

    Returns:
        The caller's subject identifier.

    Raises:
        ApiError(AUTH): If the credential is missing or fails verification.
    """
    if credentials is None or not credentials.credentials:
        raise ApiError(auth_error("missing credential"), headers=_CHALLENGE)

    try:
        return verifier.verify(credentials.credentials)
    except IdentityError as exc:
        logger.warning("Rejected bearer credential: %s", exc)
        raise ApiError(auth_error("invalid credential"), headers=_CHALLENGE) from exc
