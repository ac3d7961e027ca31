"""Request dependencies: caller identity and services.

Services live on ``app.state`` and are injected with FastAPI ``Depends``.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tasknest.adapters.sqlite.user_manager import get_user_by_token
from tasknest.exceptions import Unauthorized
from tasknest.models import User
from tasknest.repositories import ProjectRepository
from tasknest.services.activity_service import ActivityService
from tasknest.services.task_service import TaskStoreService

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """Resolve the bearer token to a user, or reject with 401."""
    if credentials is None:
        raise Unauthorized("Unauthorized")

    user = get_user_by_token(request.app.state.connection, credentials.credentials)
    if user is None:
        raise Unauthorized("Unauthorized")
    return user


def get_task_service(request: Request) -> TaskStoreService:
    return request.app.state.task_service


def get_project_repository(request: Request) -> ProjectRepository:
    return request.app.state.project_repository


def get_activity_service(request: Request) -> ActivityService:
    return request.app.state.activity_service
