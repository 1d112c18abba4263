"""FastAPI server factory and application setup."""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hvprovision._package import DESCRIPTION, PACKAGE_NAME, __version__
from hvprovision.api.middleware import LoggingMiddleware
from hvprovision.bootstrap import Application
from hvprovision.domain.core.exceptions import DomainException, ValidationError
from hvprovision.infrastructure.error import ExceptionHandler
from hvprovision.infrastructure.logging.logger import get_logger


def create_fastapi_app(application: Application) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        application: Application context; initialized here if it is not already

    Returns:
        Configured FastAPI application
    """
    application.initialize()
    server_config = application.config.server

    app = FastAPI(
        title="Hyper-V Provisioner API",
        description=DESCRIPTION,
        version=__version__,
        docs_url=server_config.docs_url if server_config.docs_enabled else None,
        redoc_url=None,
        openapi_url=server_config.openapi_url if server_config.docs_enabled else None,
    )
    app.state.application = application

    logger = get_logger(__name__)
    app.add_middleware(LoggingMiddleware)

    exception_handler = ExceptionHandler()

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        error_response = exception_handler.handle(exc)
        content = error_response.to_dict()
        content["request_id"] = getattr(request.state, "request_id", "unknown")
        return JSONResponse(status_code=error_response.http_status, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = {
            ".".join(str(p) for p in err["loc"] if p != "body") or "body": err["msg"]
            for err in exc.errors()
        }
        return await domain_exception_handler(request, ValidationError("Invalid request", fields))

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return application.health_check()

    from hvprovision.api.routers import machines

    app.include_router(machines.router, prefix="/api/v1")

    logger.info("FastAPI application created", routes=len(app.routes), service=PACKAGE_NAME)
    return app
