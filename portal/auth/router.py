"""Sign-in and sign-out: fill and clear the token slot."""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from portal.api.errors import GENERIC_ERROR_MESSAGE, ApiError
from portal.auth.dependencies import Client, Session
from portal.config.settings import Settings, get_settings


logger = structlog.get_logger(__name__)

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    cpf: str | None = None
    cnpj: str | None = None
    user_type: str | None = None


class MfaVerifyRequest(BaseModel):
    mfa_token: str
    code: str = Field(..., min_length=6, max_length=6)


def _upstream_error(error: ApiError) -> HTTPException:
    return HTTPException(
        status_code=error.status_code or status.HTTP_502_BAD_GATEWAY,
        detail=error.message,
    )


def _sign_in(
    payload: dict[str, Any],
    session: Session,
    response: Response,
    settings: Settings,
) -> dict[str, Any]:
    if not payload.get("token"):
        logger.warning("sign_in_without_token")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=GENERIC_ERROR_MESSAGE
        )
    session.set_token(payload.get("token"))
    session.store(
        response,
        settings.auth_cookie_name,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
    )
    return {"user": payload.get("user")}


@router.post("/login")
async def login(
    data: LoginRequest,
    response: Response,
    client: Client,
    session: Session,
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any]:
    """Sign in through the remote API and store the returned token."""
    try:
        payload = await client.auth.login(
            data.email,
            data.password,
            cpf=data.cpf,
            cnpj=data.cnpj,
            user_type=data.user_type,
        )
    except ApiError as e:
        logger.info("login_rejected", status_code=e.status_code, error=e.message)
        raise _upstream_error(e) from e

    payload = payload or {}
    if payload.get("requiresMfa"):
        return {"requiresMfa": True, "mfaToken": payload.get("mfaToken")}

    logger.info("login_succeeded")
    return _sign_in(payload, session, response, settings)


@router.post("/login/mfa")
async def login_mfa(
    data: MfaVerifyRequest,
    response: Response,
    client: Client,
    session: Session,
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any]:
    """Second sign-in step for accounts with MFA."""
    try:
        payload = await client.auth.mfa_verify(data.mfa_token, data.code)
    except ApiError as e:
        logger.info("mfa_rejected", status_code=e.status_code, error=e.message)
        raise _upstream_error(e) from e
    return _sign_in(payload or {}, session, response, settings)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    response: Response,
    session: Session,
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Clear the token slot."""
    session.clear()
    session.store(response, settings.auth_cookie_name)
