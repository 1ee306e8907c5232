import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from space_together.adapter.database.indexes import IndexManager
from space_together.adapter.database.registry import DatabaseRegistry
from space_together.adapter.services.event_bus import InMemoryEventBus
from space_together.app.use_cases.validation import validation_error
from space_together.domain.errors import AppError
from space_together.libs.result import Error

from .error import ClientError, ServerError, status_for

logger = logging.getLogger(__name__)


def error_body(error: Error, message: str = None) -> dict:
    body = {"message": message or error.message, "code": error.code}
    if error.details is not None:
        body["details"] = error.details
    return body


async def handle_client_error(request: Request, exc: ClientError):
    body = error_body(exc.base_error)
    logger.warning(f"Client error: {body}")
    return JSONResponse(status_code=exc.status_code, content=body)


async def handle_server_error(request: Request, exc: ServerError):
    error = exc.base_error
    logger.error(f"Server error: {error.code} {error.reason or error.message}")
    # Internal failures keep their code but not their message
    message = "Internal server error" if exc.status_code == 500 else None
    return JSONResponse(status_code=exc.status_code, content=error_body(error, message))


async def handle_app_error(request: Request, exc: AppError):
    status_code = status_for(exc.error)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return await handle_server_error(request, ServerError(exc.error, status_code))
    return await handle_client_error(request, ClientError(exc.error, status_code))


async def handle_validation_error(request: Request, exc: RequestValidationError):
    error = validation_error(exc)
    logger.warning(f"Validation error on {request.url.path}: {error.details}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(error))


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.event_bus.close()
    app.state.registry.close()
    logger.info("Shut down event bus and database registry")


def create_app(ApplicationConfig, registry: DatabaseRegistry = None) -> FastAPI:
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL)

    app = FastAPI(title="Space Together API", version="0.1.0", lifespan=lifespan)

    # Shared services live on app.state for the whole process
    app.state.registry = registry or DatabaseRegistry.from_config(ApplicationConfig)
    app.state.index_manager = IndexManager()
    app.state.event_bus = InMemoryEventBus(ApplicationConfig.EVENT_QUEUE_SIZE)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from space_together.api.routes import entities, events, health, join_school_request

    app.include_router(health.router, tags=["Health"])
    app.include_router(events.router)
    app.include_router(join_school_request.router)
    for router in entities.entity_routers():
        app.include_router(router)

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
