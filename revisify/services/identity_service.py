from dataclasses import dataclass

from ..errors import Unauthenticated
from ..utils.jwt_helper import decode_access_token


@dataclass(frozen=True)
class SessionContext:
    """The authenticated caller, threaded explicitly into every gate."""

    account_id: str
    email: str | None


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise Unauthenticated("Token is missing!")

    if " " in authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer":
            raise Unauthenticated("Invalid header format. Expected 'Bearer <token>'")
    else:
        token = authorization

    token = token.strip()
    if not token or token.lower() in ("null", "undefined", "none"):
        raise Unauthenticated("Token is missing!")
    return token


def authenticate(authorization: str | None) -> SessionContext:
    payload = decode_access_token(_bearer_token(authorization))

    account_id = payload.get("sub")
    email = payload.get("email")
    if not account_id:
        raise Unauthenticated("Token missing user ID claim")

    return SessionContext(account_id=str(account_id), email=email.lower() if email else None)
