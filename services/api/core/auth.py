"""
HTTP Basic auth for the admin routes.

Usage:
    from core.auth import require_admin

    router = APIRouter(dependencies=[Depends(require_admin)])

Credentials come from Settings.resolved_credentials() once at startup and
are checked again on every request. There are no sessions or tokens.
"""
import base64
import binascii
import hmac
import logging
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)

UNAUTHORIZED_DETAIL = "Unauthorized"


class CredentialStore:
    """Read-only username -> password map."""

    def __init__(self, credentials: Mapping[str, str]):
        if not credentials:
            raise ValueError("CredentialStore needs at least one username/password pair")
        self._credentials = MappingProxyType(dict(credentials))

    def __len__(self) -> int:
        return len(self._credentials)

    def __contains__(self, username: object) -> bool:
        return username in self._credentials

    def verify(self, username: str, password: str) -> bool:
        expected = self._credentials.get(username)
        if expected is None:
            return False
        return hmac.compare_digest(expected.encode("utf-8"), password.encode("utf-8"))


def parse_basic_auth(header: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Decode an `Authorization: Basic <base64(user:pass)>` header.

    Returns (user, password) or None for a missing header, another scheme,
    bad base64, non-UTF-8 bytes or a payload without ':'.
    """
    if not header:
        return None

    scheme, _, encoded = header.partition(" ")
    encoded = encoded.strip()
    if scheme != "Basic" or not encoded:
        return None

    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED_DETAIL,
        headers={"WWW-Authenticate": 'Basic realm="admin"'},
    )


async def require_admin(request: Request) -> str:
    """
    FastAPI dependency guarding the admin router.

    Returns the authenticated username.

    Raises:
        HTTPException 401: same generic error for every failure mode
    """
    credentials: CredentialStore = request.app.state.credentials
    parsed = parse_basic_auth(request.headers.get("Authorization"))
    if parsed is None:
        raise _unauthorized()

    username, password = parsed
    if not credentials.verify(username, password):
        logger.info("Rejected admin login from %s", request.client.host if request.client else "unknown")
        raise _unauthorized()

    return username
