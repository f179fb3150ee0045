from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from common.jwt import verify_token

# Tokens come from the company identity provider; this service only verifies them.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    """
    The admin (or staff) member performing a request, as named by the token's `sub`.
    """
    id: str
    roles: FrozenSet[str] = field(default_factory=frozenset)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    """
    Dependency to resolve the acting user from the bearer JWT.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise credentials_exception
    try:
        payload = verify_token(credentials.credentials, expected_token_type="access")
    except JWTError:
        raise credentials_exception

    actor_id: Optional[str] = payload.get("sub")
    if not actor_id:
        raise credentials_exception
    return Actor(id=str(actor_id), roles=frozenset(payload.get("roles") or []))


def require_roles(*allowed_roles: str):
    """
    Dependency factory to enforce that the current access token includes at least one allowed role.
    Usage:
      actor: Actor = Depends(require_roles(ADMIN, STAFF))
    """
    async def _dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.roles.intersection(allowed_roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return actor

    return _dependency
