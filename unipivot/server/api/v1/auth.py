"""
Authentication Endpoints.

Sign-up, login and logout with opaque bearer tokens, plus the signed-in
user's own profile.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.logging_config import get_logger
from unipivot.core.models.io.common import MessageResponse, column_values
from unipivot.core.models.io.users import (
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    TokenResponse,
    UserRead,
)
from unipivot.server.deps import bearer_scheme, get_current_user
from unipivot.server.services import auth as auth_service

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create a new account with the USER grade.",
    response_description="The created user.",
    responses={
        201: {"description": "Account created"},
        400: {"description": "Password too short"},
        409: {"description": "Email already registered"},
    },
)
async def register(data: RegisterRequest, session: AsyncSession = Depends(get_session)) -> UserRead:
    """
    Create a new account.

    - **email**: Login email, unique (case-insensitive).
    - **password**: Plain password, at least the configured minimum length.
    - **name**: Display name.
    - **phone**, **origin**, **birth_year**: Optional profile fields.
    """
    user = await auth_service.register_user(session, data)
    return UserRead.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log In",
    description="Exchange email and password for a bearer token.",
    response_description="Bearer token and its expiry.",
    responses={
        200: {"description": "Logged in"},
        401: {"description": "Invalid email or password"},
        403: {"description": "Account suspended"},
    },
)
async def login(data: LoginRequest, session: AsyncSession = Depends(get_session)) -> TokenResponse:
    """
    Log in.

    Send the returned token as ``Authorization: Bearer <token>`` on later requests.
    """
    token = await auth_service.login(session, data.email, data.password)
    return TokenResponse(access_token=token.token, expires_at=token.expires_at)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log Out",
    description="Revoke the bearer token used for this request.",
    responses={204: {"description": "Token revoked"}, 401: {"description": "Not authenticated"}},
)
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await auth_service.logout(session, credentials.credentials)
    logger.info(f"User {current_user.id} logged out")


@router.get(
    "/me",
    response_model=UserRead,
    summary="Get Current User",
    description="Return the account of the signed-in user.",
    responses={401: {"description": "Not authenticated"}},
)
async def me(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)


@router.patch(
    "/me",
    response_model=UserRead,
    summary="Update Profile",
    description="Update profile fields of the signed-in user. Only provided fields change.",
    responses={401: {"description": "Not authenticated"}},
)
async def update_me(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    """
    Update the signed-in user's profile.

    - **name**: Display name.
    - **phone**: Contact number.
    - **origin**: Country or region of origin.
    - **birth_year**: Year of birth.
    """
    for key, value in column_values(data, exclude_unset=True).items():
        setattr(current_user, key, value)
    session.add(current_user)
    await session.commit()
    await session.refresh(current_user)
    return UserRead.model_validate(current_user)


@router.post(
    "/me/password",
    response_model=MessageResponse,
    summary="Change Password",
    description="Change the password. Every token of the user is revoked, so log in again afterwards.",
    responses={
        200: {"description": "Password changed"},
        400: {"description": "New password too short"},
        401: {"description": "Current password is incorrect"},
    },
)
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await auth_service.change_password(session, current_user, data.current_password, data.new_password)
    return MessageResponse(message="Password changed, please log in again")
