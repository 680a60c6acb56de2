from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from nexus.application.dtos.request_dto import (
    CollaborationRequestResponse,
    CollaborationRequestWithUsers,
    CreateRequestBody,
    UpdateRequestStatusBody,
)
from nexus.application.dtos.user_dto import PublicUser
from nexus.application.use_cases.collaboration_requests import (
    RespondToCollaborationRequestUseCase,
    SendCollaborationRequestUseCase,
)
from nexus.domain.entities.collaboration_request import RequestStatus
from nexus.domain.errors import ConflictError, NotFoundError, PermissionDeniedError
from nexus.infrastructure.api.dependencies import (
    get_current_user,
    get_request_repo,
    get_user_repo,
)
from nexus.infrastructure.auth.token_service import TokenClaims
from nexus.infrastructure.database.repositories.collaboration_request_repository import (
    CollaborationRequestRepository,
)
from nexus.infrastructure.database.repositories.user_repository import UserRepository

router = APIRouter(
    prefix="/api/requests",
    tags=["Collaboration Requests"],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


def _to_http_error(exc: ValueError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post(
    "",
    response_model=CollaborationRequestResponse,
    summary="Send Collaboration Request",
    description="""
    Ask another user to connect. The request starts out `pending`.

    Rejected with 400 for requests to yourself, 404 for unknown receivers and
    409 if you already have a pending request to the same user.
    """,
)
def create_request(
    body: CreateRequestBody,
    claims: TokenClaims = Depends(get_current_user),
    requests: CollaborationRequestRepository = Depends(get_request_repo),
    users: UserRepository = Depends(get_user_repo),
):
    uc = SendCollaborationRequestUseCase(requests=requests, users=users)
    try:
        entity = uc.execute(claims.user_id, body.receiver_id, body.message)
    except ValueError as exc:
        raise _to_http_error(exc) from exc
    return CollaborationRequestResponse.from_entity(entity)


@router.get(
    "",
    response_model=list[CollaborationRequestWithUsers],
    summary="List Collaboration Requests",
    description="Requests the caller sent or received, newest first, with both parties attached.",
)
def list_requests(
    claims: TokenClaims = Depends(get_current_user),
    requests: CollaborationRequestRepository = Depends(get_request_repo),
    users: UserRepository = Depends(get_user_repo),
):
    out = []
    for r in requests.list_for_user(claims.user_id):
        sender = users.get(r.sender_id)
        receiver = users.get(r.receiver_id)
        out.append(
            CollaborationRequestWithUsers(
                **CollaborationRequestResponse.from_entity(r).model_dump(),
                sender=PublicUser.from_entity(sender) if sender else None,
                receiver=PublicUser.from_entity(receiver) if receiver else None,
            )
        )
    return out


@router.patch(
    "/{request_id}",
    response_model=CollaborationRequestResponse,
    summary="Respond to Collaboration Request",
    description="""
    Accept or reject a pending request addressed to the caller.

    Accepted and rejected are final: changing them again returns 409.
    """,
    responses={
        403: {"description": "Forbidden - Only the receiver may respond"},
        404: {"description": "Not Found - Request does not exist"},
        409: {"description": "Conflict - Request is no longer pending"},
    },
)
def update_request_status(
    request_id: int,
    body: UpdateRequestStatusBody,
    claims: TokenClaims = Depends(get_current_user),
    requests: CollaborationRequestRepository = Depends(get_request_repo),
):
    uc = RespondToCollaborationRequestUseCase(requests=requests)
    try:
        entity = uc.execute(claims.user_id, request_id, RequestStatus(body.status))
    except ValueError as exc:
        raise _to_http_error(exc) from exc
    return CollaborationRequestResponse.from_entity(entity)
