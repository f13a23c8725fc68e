"""FastAPI dependencies — hand routes the services built at startup.

Usage in any route:
    @router.get("/document")
    async def list_documents(rag: RagService = Depends(get_rag_service)):
        ...
"""

import secrets

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from apps.api.config import Settings
from apps.api.container import ServiceContainer
from apps.api.exceptions import UnauthorizedException
from apps.api.services.chat_service import ChatService
from apps.api.services.rag_service import RagService

# auto_error=False: we decide ourselves whether credentials are required
basic_scheme = HTTPBasic(auto_error=False)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_settings(container: ServiceContainer = Depends(get_container)) -> Settings:
    return container.settings


def get_rag_service(container: ServiceContainer = Depends(get_container)) -> RagService:
    return container.rag_service


def get_chat_service(container: ServiceContainer = Depends(get_container)) -> ChatService:
    return container.chat_service


async def require_admin(
    credentials: HTTPBasicCredentials | None = Depends(basic_scheme),
    settings: Settings = Depends(get_settings),
) -> None:
    """Basic auth guard for the document admin routes.

    A no-op unless both BASIC_AUTH_USERNAME and BASIC_AUTH_PASSWORD are set.
    """
    if not settings.basic_auth_enabled:
        return
    if credentials is None:
        raise UnauthorizedException()

    username_ok = secrets.compare_digest(
        credentials.username.encode(), settings.basic_auth_username.encode()
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode(), settings.basic_auth_password.encode()
    )
    if not (username_ok and password_ok):
        raise UnauthorizedException("invalid credentials")
