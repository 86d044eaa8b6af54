import logging

from fastapi import Request

from app.services.oauth_service import OAuthClient
from app.services.reminder_service import ReminderService
from app.services.todo_service import TodoService

logger = logging.getLogger(__name__)

AUTH_USER_KEY = "user"


class NotAuthenticated(Exception):
    pass


def require_user(request: Request) -> str:
    """Return the session identity or reject the request before the handler runs."""
    user = request.session.get(AUTH_USER_KEY)
    if not user:
        logger.info("User Unauthenticated")
        raise NotAuthenticated()
    return user


def get_todo_service(request: Request) -> TodoService:
    return request.app.state.todo_service


def get_reminder_service(request: Request) -> ReminderService:
    return request.app.state.reminder_service


def get_oauth_client(request: Request) -> OAuthClient:
    return request.app.state.oauth_client
