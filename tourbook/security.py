from __future__ import annotations

import time
from typing import Annotated, Callable, Iterable

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

from .core import get_settings
from .roles import Role

# ---------------------------------------------------------------------------
#  Basic JWT helpers
# ---------------------------------------------------------------------------
ACCESS = "access"
REFRESH = "refresh"


def _now() -> int:
    return int(time.time())


def create_token(
    sub: str,
    role: str,
    *,
    token_type: str = ACCESS,
    expires_in: int | None = None,
    **extra_claims,
) -> str:
    """Return a signed JWT including any *extra_claims*.

    Standard claims:
    • sub  – user identifier
    • role – user role string
    • typ  – ``access`` or ``refresh``
    • exp  – expiry (unix epoch)
    """
    settings = get_settings()
    if expires_in is None:
        expires_in = (
            settings.REFRESH_TOKEN_EXPIRE_SECONDS if token_type == REFRESH
            else settings.ACCESS_TOKEN_EXPIRE_SECONDS
        )
    payload = {
        "sub": str(sub),
        "role": role,
        "typ": token_type,
        "exp": _now() + expires_in,
    }
    payload.update(extra_claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify *token* and return its payload."""
    settings = get_settings()
    try:
        payload: dict = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token") from exc
    return payload


def mint_tokens(sub: str, role: str, **extra_claims) -> tuple[str, str]:
    """Return *(access, refresh)* pair embedding *extra_claims* in both."""
    access = create_token(sub, role, token_type=ACCESS, **extra_claims)
    refresh = create_token(sub, role, token_type=REFRESH, **extra_claims)
    return access, refresh


# ---------------------------------------------------------------------------
#  Dependencies
# ---------------------------------------------------------------------------
async def _extract_token(req: Request) -> str | None:
    """Return JWT from Authorization header *or* access_token cookie."""
    auth: str | None = req.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1]
    return req.cookies.get("access_token")


async def current_user(req: Request) -> dict:
    """FastAPI dependency returning the JWT payload or raises 401."""
    token = await _extract_token(req)
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing credentials")
    payload = decode_token(token)
    if payload.get("typ", ACCESS) != ACCESS:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    return payload


def _to_role_str(value: "str | Role") -> str:
    """Return the *string* value of a Role or raw str."""
    if isinstance(value, Role):
        return value.value
    return str(value)


def role_required(*allowed: "str | Role | Iterable[str | Role]") -> Callable[[dict], dict]:
    """Return a dependency that checks *current_user* role is within *allowed*.

    Usage:
        @router.get("/stats", dependencies=[Depends(role_required(Role.admin))])
        async def stats():
            ...
    """
    if len(allowed) == 1 and isinstance(allowed[0], (list, tuple, set)):
        allowed = tuple(allowed[0])
    allowed_set = {_to_role_str(a) for a in allowed}

    async def _dep(user: Annotated[dict, Depends(current_user)]):
        role: str | None = user.get("role")
        if role not in allowed_set:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Forbidden")
        return user

    return _dep


CurrentUser = Annotated[dict, Depends(current_user)]
AdminUser = Annotated[dict, Depends(role_required(Role.admin))]
