from datetime import timedelta
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from src.adapters.auth.crypto import PasslibPasswordHasher
from src.adapters.orm import SQLAdminRepo
from src.api.auth_utils import ACCESS_TOKEN_EXPIRE_MINUTES, create_access_token
from src.api.deps import (
    get_admin_repo,
    get_client_ip,
    get_current_admin,
    get_password_hasher,
    get_rate_limiter,
)
from src.app_shell.rate_limit import RateLimiter
from src.components.admin import AdminUser, LoginInput, run_login

router = APIRouter()


class Token(BaseModel):
    access_token: str
    token_type: str


@router.post("/login", response_model=Token)
def login_for_access_token(
    request: Request,
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    admin_repo: SQLAdminRepo = Depends(get_admin_repo),
    hasher: PasslibPasswordHasher = Depends(get_password_hasher),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> Token:
    """Authenticate an admin and return an access token."""
    if not rate_limiter.check_login(get_client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Try again later.",
        )

    result = run_login(
        LoginInput(email=form_data.username, password=form_data.password), admin_repo, hasher
    )
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": str(result.user.id)}, expires_delta=access_token_expires
    )

    # Set HttpOnly Cookie
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        expires=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )

    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    """Log out by clearing the cookie."""
    response.delete_cookie(key="access_token")
    return {"status": "success"}


@router.get("/me")
def read_admin_me(
    current_admin: AdminUser = Depends(get_current_admin),
) -> dict[str, Any]:
    return {
        "id": str(current_admin.id),
        "email": current_admin.email,
        "name": current_admin.name,
    }
