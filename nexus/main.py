from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from nexus.application.dtos.common_dto import HealthResponse, RootResponse
from nexus.domain.services.presence_registry import PresenceRegistry
from nexus.infrastructure.api.middlewares import add_default_middlewares
from nexus.infrastructure.api.routes.auth_routes import router as auth_router
from nexus.infrastructure.api.routes.chat_routes import router as chat_router
from nexus.infrastructure.api.routes.directory_routes import router as directory_router
from nexus.infrastructure.api.routes.profile_routes import router as profile_router
from nexus.infrastructure.api.routes.request_routes import router as request_router
from nexus.infrastructure.auth.token_service import TokenService
from nexus.infrastructure.database.postgres_client import (
    close_postgres_client,
    get_postgres_client,
)
from nexus.infrastructure.database.repositories.collaboration_request_repository import (
    CollaborationRequestRepository,
)
from nexus.infrastructure.database.repositories.message_repository import MessageRepository
from nexus.infrastructure.database.repositories.profile_repository import ProfileRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository
from nexus.infrastructure.database.supabase_client import get_supabase_client
from nexus.infrastructure.log_config import configure_logging

logger = logging.getLogger(__name__)


def _init_state(app: FastAPI) -> None:
    """Build the per-application services the routers pull from app.state."""
    client = get_supabase_client()
    pg = get_postgres_client()
    if pg is not None:
        pg.ensure_schema()
        backend = "postgres"
    else:
        backend = "supabase" if client is not None else "memory"

    app.state.users = UserRepository(client)
    app.state.profiles = ProfileRepository(client)
    app.state.requests = CollaborationRequestRepository(client)
    app.state.messages = MessageRepository(client)
    app.state.tokens = TokenService()
    # live chat bindings; lost on restart, clients re-authenticate
    app.state.presence = PresenceRegistry()
    logger.info("Storage backend: %s", backend)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    close_postgres_client()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Business Nexus Backend",
        version="0.1.0",
        description="""
        ## Business Nexus API

        Networking platform connecting investors and entrepreneurs.

        ### Features
        - **Accounts**: Registration and login with bearer tokens
        - **Profiles**: Company, funding and portfolio details
        - **Directory**: Browse entrepreneurs and investors
        - **Collaboration Requests**: Ask to connect; accept or reject
        - **Chat**: Real-time direct messages over the WebSocket at `/ws`,
          with persisted history

        ### Authentication
        All endpoints except registration, login, root and health require a
        Bearer token in the Authorization header:
        ```
        Authorization: Bearer your-jwt-token
        ```
        The chat socket authenticates with its first frame instead:
        `{"type": "auth", "token": "your-jwt-token"}`.

        ### Error Responses
        - **400 Bad Request**: Invalid request or duplicate account
        - **401 Unauthorized**: Missing or invalid authentication token
        - **403 Forbidden**: Not allowed to act on the resource
        - **404 Not Found**: Requested resource does not exist
        - **409 Conflict**: Request already pending or already answered
        - **422 Unprocessable Entity**: Validation error in request body
        """,
        lifespan=_lifespan,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app)
    _init_state(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the Business Nexus API",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "business-nexus-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(directory_router)
    app.include_router(request_router)
    app.include_router(chat_router)
    return app


app = create_app()
