from typing import Optional

from fastapi import APIRouter, Cookie, Response, status

from tourbook.api.v1.schemas.auth_schemas import (
    RegisterRequest, LoginRequest, LoginResponse, RefreshTokenRequest,
    RefreshTokenResponse, UserOut
)
from tourbook.core import AuthenticationError, get_settings
from tourbook.deps import SessionDep
from tourbook.security import CurrentUser
from tourbook.services.auth_service import AuthService
from .utils import get_user_id


router = APIRouter()


def _set_auth_cookies(response: Response, access_token: str, refresh_token: Optional[str] = None) -> None:
    settings = get_settings()
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_SECONDS
    )
    if refresh_token:
        response.set_cookie(
            key="refresh_token",
            value=refresh_token,
            httponly=True,
            secure=True,
            samesite="lax",
            max_age=settings.REFRESH_TOKEN_EXPIRE_SECONDS
        )


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, response: Response, sess: SessionDep):
    """Create a customer account and return a token pair"""
    service = AuthService(sess)
    user, access_token, refresh_token = await service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password
    )
    await sess.commit()

    _set_auth_cookies(response, access_token, refresh_token)
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserOut.model_validate(user)
    )


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, response: Response, sess: SessionDep):
    """Login with email and password"""
    service = AuthService(sess)
    user, access_token, refresh_token = await service.authenticate_user(
        email=payload.email,
        password=payload.password
    )

    _set_auth_cookies(response, access_token, refresh_token)
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserOut.model_validate(user)
    )


@router.post("/refresh", response_model=RefreshTokenResponse)
async def refresh(
    response: Response,
    sess: SessionDep,
    payload: Optional[RefreshTokenRequest] = None,
    refresh_token: Optional[str] = Cookie(None),
):
    """Get a new access token from the body or the refresh_token cookie"""
    token = payload.refresh_token if payload else refresh_token
    if not token:
        raise AuthenticationError("Refresh token required")

    service = AuthService(sess)
    access_token = await service.refresh_access_token(token)

    _set_auth_cookies(response, access_token)
    return RefreshTokenResponse(access_token=access_token)


@router.get("/me", response_model=UserOut)
async def me(sess: SessionDep, user: CurrentUser):
    service = AuthService(sess)
    return UserOut.model_validate(await service.get_user(get_user_id(user)))


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")
    return {"success": True}
