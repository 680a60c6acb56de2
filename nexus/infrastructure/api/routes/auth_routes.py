from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from nexus.application.dtos.user_dto import (
    AuthResponse,
    LoginRequest,
    PublicUser,
    RegisterRequest,
    UserWithProfile,
)
from nexus.application.use_cases.login_user import LoginUserUseCase
from nexus.application.use_cases.register_user import RegisterUserUseCase
from nexus.domain.errors import ConflictError, InvalidCredentialsError
from nexus.infrastructure.api.dependencies import (
    get_current_user,
    get_profile_repo,
    get_token_service,
    get_user_repo,
)
from nexus.infrastructure.auth.token_service import TokenClaims, TokenService
from nexus.infrastructure.database.repositories.profile_repository import ProfileRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"],
    responses={
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Register Account",
    description="""
    Create an investor or entrepreneur account.

    The password is stored as a salted hash. The response carries the new
    user (without the hash) and a bearer token valid for both the HTTP API and
    the chat socket at `/ws`.
    """,
    responses={400: {"description": "Bad Request - Email already registered"}},
)
def register(
    body: RegisterRequest,
    users: UserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
):
    """Register a new user and return a token."""
    uc = RegisterUserUseCase(users=users, tokens=tokens)
    try:
        user, token = uc.execute(
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            password=body.password,
            role=body.role,
            bio=body.bio,
            location=body.location,
            avatar=body.avatar,
        )
    except ConflictError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AuthResponse(user=PublicUser.from_entity(user), token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log In",
    description="Exchange email and password for a bearer token.",
    responses={401: {"description": "Unauthorized - Invalid credentials"}},
)
def login(
    body: LoginRequest,
    users: UserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
):
    """Log in with email and password."""
    try:
        user, token = LoginUserUseCase(users=users, tokens=tokens).execute(body.email, body.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return AuthResponse(user=PublicUser.from_entity(user), token=token)


@router.get(
    "/me",
    response_model=UserWithProfile,
    summary="Get Current User",
    description="""
    Return the authenticated user together with their profile, if one exists.

    **Authentication required**: Yes (Bearer token)
    """,
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        404: {"description": "Not Found - The token's user no longer exists"},
    },
)
def get_me(
    claims: TokenClaims = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repo),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    user = users.get(claims.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserWithProfile.from_entities(user, profiles.get_by_user(user.id))
