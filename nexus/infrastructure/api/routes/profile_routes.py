from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from nexus.application.dtos.profile_dto import UpdateProfileRequest
from nexus.application.dtos.user_dto import UserWithProfile
from nexus.application.use_cases.update_profile import UpdateProfileUseCase
from nexus.domain.errors import NotFoundError
from nexus.infrastructure.api.dependencies import (
    get_current_user,
    get_profile_repo,
    get_user_repo,
)
from nexus.infrastructure.auth.token_service import TokenClaims
from nexus.infrastructure.database.repositories.profile_repository import ProfileRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository

router = APIRouter(
    prefix="/api/profile",
    tags=["Profiles"],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        404: {"description": "Not Found - User does not exist"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.get(
    "/{user_id}",
    response_model=UserWithProfile,
    summary="Get User Profile",
    description="Public fields of any user plus their profile details.",
)
def get_profile(
    user_id: int,
    _: TokenClaims = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repo),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    user = users.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserWithProfile.from_entities(user, profiles.get_by_user(user_id))


@router.put(
    "",
    response_model=UserWithProfile,
    summary="Update Own Profile",
    description="""
    Create or update the caller's profile.

    Only the fields present in the body are written; everything else keeps its
    stored value. `bio`, `location` and `avatar` update the user record.

    **Authentication required**: Yes (Bearer token)
    """,
)
def update_profile(
    body: UpdateProfileRequest,
    claims: TokenClaims = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repo),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    fields = body.model_dump(exclude_unset=True)
    try:
        user, profile = UpdateProfileUseCase(users=users, profiles=profiles).execute(
            claims.user_id, fields
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return UserWithProfile.from_entities(user, profile)
