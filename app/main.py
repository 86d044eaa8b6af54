import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from app.config import Settings, load_settings
from app.database import StorageError, create_engine, create_sessionmaker, init_db
from app.dependencies import AUTH_USER_KEY, NotAuthenticated
from app.logging_config import setup_logging
from app.repositories.reminder_repo import ReminderRepository
from app.repositories.todo_repo import TodoRepository
from app.routers import auth_router, reminder_router, todo_router, user_router
from app.services.oauth_service import OAuthClient
from app.services.reminder_service import ReminderService
from app.services.todo_service import TodoService
from app.sessions import RotatingSessionMiddleware, SessionRequiredMiddleware, session_options

logger = logging.getLogger(__name__)

PROTECTED_PATHS = ("/todos", "/reminders", "/whoami")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.settings.create_schema:
        await init_db(app.state.engine)
    yield
    await app.state.engine.dispose()


async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
    return Response(status_code=401)


async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app(settings: Optional[Settings] = None, oauth_client: Optional[OAuthClient] = None) -> FastAPI:
    """Build the API with its engine, services and OAuth client wired in."""
    settings = settings or load_settings()

    app = FastAPI(title="Todo Reminders API", lifespan=lifespan)

    engine = create_engine(settings.database_url)
    todo_repo = TodoRepository()
    reminder_repo = ReminderRepository()

    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = create_sessionmaker(engine)
    app.state.todo_service = TodoService(todo_repo, reminder_repo)
    app.state.reminder_service = ReminderService(reminder_repo)
    app.state.oauth_client = oauth_client or OAuthClient(settings)

    app.add_exception_handler(NotAuthenticated, not_authenticated_handler)
    app.add_exception_handler(StorageError, storage_error_handler)

    # added first so it runs inside the session middleware
    app.add_middleware(SessionRequiredMiddleware, protected_paths=PROTECTED_PATHS, user_key=AUTH_USER_KEY)
    app.add_middleware(RotatingSessionMiddleware, **session_options(settings))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(todo_router.router, prefix="/todos", tags=["Todos"])
    app.include_router(reminder_router.router, prefix="/reminders", tags=["Reminders"])
    app.include_router(user_router.router, tags=["Users"])
    app.include_router(auth_router.router, prefix="/auth", tags=["Auth"])

    # Root health
    @app.get("/")
    async def read_root():
        return {"status": "ok"}

    return app


settings = load_settings()
setup_logging(settings.log_level)
app = create_app(settings)


def run() -> None:
    uvicorn.run(app, host=settings.server_address, port=settings.server_port)


if __name__ == "__main__":
    run()
