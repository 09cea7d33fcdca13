"""
Authentication Endpoints

Registration and login return a signed access token; ``/me`` resolves
the token back to the user and its permissions.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models import User
from app.schemas import (
    CurrentUserResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from app.services.auth import RegistrationInput, get_credential_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Register a staff account",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """Password policy and duplicate checks run before anything is stored."""
    token = await get_credential_service(db).register(
        RegistrationInput(
            email=data.email,
            password=data.password,
            name=data.name,
            role_id=data.role_id,
        )
    )
    return TokenResponse(message="User registered successfully", token=token)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Log in",
)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Exchange email and password for a token.

    After too many failures the account is blocked for a while; unknown
    emails and wrong passwords get the same answer.
    """
    token = await get_credential_service(db).login(data.email, data.password)
    return TokenResponse(message="Login successful", token=token)


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
async def me(user: User = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role.name,
        permissions=user.role.permission_names,
    )
