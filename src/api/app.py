import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError

logger = logging.getLogger(__name__)

# Clients see one message per category; the code is logged.
_CLIENT_MESSAGES = {
    401: "Authentication failed",
    403: "Insufficient permissions",
}


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {
        "code": exc.base_error.code,
        "message": _CLIENT_MESSAGES.get(exc.status_code, exc.base_error.message),
    }
    logger.warning(
        f"Client error on {request.method} {request.url.path}: "
        f"{exc.base_error.code} ({exc.base_error.message})"
    )
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    retryable = exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    error_dict = {
        "code": exc.base_error.code,
        "message": exc.base_error.message if retryable else "Internal server error",
    }
    logger.error(f"Server error on {request.method} {request.url.path}: {exc.base_error.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    logger.warning(f"Validation error on {request.method} {request.url.path}: {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Validation failed",
                "details": details,
            }
        },
    )


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL.upper())

    app = FastAPI(title="Auth Service", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import auth

    app.include_router(auth.router, tags=["Authentication"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
