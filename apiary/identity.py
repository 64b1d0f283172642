"""Bearer token verification for Apiary.

Design decisions:
- Tokens are JWTs issued by the identity provider; the ``sub`` claim is the
  stable subject identifier that owns hives.
- The verifier is an explicit object built once from ``Settings`` at startup
  and stored on ``app.state``.  Nothing reads the signing secret from a
  module-level global.
- ``verify()`` raises ``IdentityError`` for every kind of rejection (expired,
  malformed, bad signature, audience/issuer mismatch, missing ``sub``); the
  AuthGate collapses all of them to a single "invalid credential" response.
- ``create_token()`` is provided for tests and the ``apiary issue-token`` CLI
  command only.  Production tokens come from the identity provider.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field

from jose import JWTError, jwt

from apiary.config import Settings


class IdentityError(Exception):
    """Raised when a bearer token cannot be verified."""


@dataclass(frozen=True)
class IdentityVerifier:
    """Verifies bearer JWTs and returns the subject identifier they carry.

    Attributes:
        secret:     Key used to verify token signatures.
        algorithms: Accepted signing algorithms.
        audience:   Required ``aud`` claim, or None to skip the audience check.
        issuer:     Required ``iss`` claim, or None to skip the issuer check.
    """

    secret: str
    algorithms: list[str] = field(default_factory=lambda: ["HS256"])
    audience: str | None = None
    issuer: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityVerifier":
        return cls(
            secret=settings.identity_secret,
            algorithms=list(settings.identity_algorithms),
            audience=settings.identity_audience,
            issuer=settings.identity_issuer,
        )

    def verify(self, token: str) -> str:
        """Decode *token* and return its ``sub`` claim.

        Args:
            token: Raw JWT string (without the 'Bearer ' prefix).

        Returns:
            The subject identifier of the authenticated caller.

        Raises:
            IdentityError: If the token is invalid, expired, has the wrong
                           audience/issuer, or carries no subject.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as exc:
            raise IdentityError(f"Invalid token: {exc}") from exc

        subject = payload.get("sub")
        if not subject:
            raise IdentityError("Token missing required claim: sub")
        return str(subject)

    def create_token(
        self,
        subject: str,
        ttl: datetime.timedelta = datetime.timedelta(hours=1),
        **claims: object,
    ) -> str:
        """Create a signed JWT for *subject* that this verifier will accept.

        This is a utility for tests and CLI use only.

        Args:
            subject: Value for the ``sub`` claim.
            ttl:     Lifetime of the token from now.
            claims:  Extra claims to embed (override the defaults).

        Returns:
            Signed JWT string.
        """
        now = datetime.datetime.now(datetime.timezone.utc)
        payload: dict[str, object] = {"sub": subject, "iat": now, "exp": now + ttl}
        if self.audience is not None:
            payload["aud"] = self.audience
        if self.issuer is not None:
            payload["iss"] = self.issuer
        payload.update(claims)
        return jwt.encode(payload, self.secret, algorithm=self.algorithms[0])
