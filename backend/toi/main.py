import json
import logging
from contextlib import asynccontextmanager
from dataclasses import replace

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from .api import assist as assist_api
from .api import attendees as attendees_api
from .api import banking as banking_api
from .api import clock as clock_api
from .api import contacts as contacts_api
from .api import events as events_api
from .api import news as news_api
from .api import notes as notes_api
from .api import places as places_api
from .api import recipes as recipes_api
from .api import tags as tags_api
from .api import todos as todos_api
from .api import weather as weather_api
from .config import LOG_LEVEL, load_toi_config
from .database import init_db
from .services.news import load_alias_names, seed_aliases
from .state import ToiState, build_state, close_state
from .utils.error_handlers import AppError, create_error_response, database_error_status

logger = logging.getLogger(__name__)

ROUTERS = [
    clock_api.router,
    notes_api.router,
    todos_api.router,
    contacts_api.router,
    attendees_api.router,
    events_api.router,
    places_api.router,
    recipes_api.router,
    tags_api.router,
    banking_api.router,
    weather_api.router,
    news_api.router,
    assist_api.router,
]

# Paths the assistant must never plan against.
HIDDEN_FROM_ASSISTANT = {"/assist", "/health"}


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_openapi_spec(app: FastAPI) -> str:
    """The app's OpenAPI document, minus the assistant route itself, as compact JSON."""
    spec = dict(app.openapi())
    spec["paths"] = {path: item for path, item in spec.get("paths", {}).items() if path not in HIDDEN_FROM_ASSISTANT}
    return json.dumps(spec, separators=(",", ":"))


def install_state(app: FastAPI, state: ToiState) -> ToiState:
    state = replace(state, openapi_spec=build_openapi_spec(app))
    app.state.toi = state
    return state


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    config = load_toi_config()
    state = build_state(config)
    engine = state.session_factory.kw["bind"]
    init_db(engine)
    seed_aliases(state.session_factory, load_alias_names())
    install_state(app, state)
    logger.info("toi server ready on %s", config.server.bind_addr)
    try:
        yield
    finally:
        await close_state(state)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return create_error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return create_error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg") or "Invalid request")
        return create_error_response(400, message, {"errors": json.loads(json.dumps(errors, default=str))})

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        status_code, message = database_error_status(exc)
        if status_code >= 500:
            logger.exception("Database error on %s %s: %s", request.method, request.url.path, exc)
        else:
            logger.info("Database conflict on %s %s: %s", request.method, request.url.path, exc.orig)
        return create_error_response(status_code, message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return create_error_response(500, "Something went wrong on our end. Please try again later.")


def create_app(state: ToiState | None = None) -> FastAPI:
    """Build the app. With ``state`` given (tests), startup wiring is skipped."""
    app = FastAPI(
        title="toi",
        description="Personal assistant API: notes, todos, contacts, events, places, recipes, banking, news and weather.",
        lifespan=None if state is not None else lifespan,
    )
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    register_exception_handlers(app)
    if state is not None:
        install_state(app, state)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    configure_logging()
    config = load_toi_config()
    host, _, port = config.server.bind_addr.rpartition(":")
    uvicorn.run(app, host=host or "127.0.0.1", port=int(port))


if __name__ == "__main__":
    run()
