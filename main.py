"""
HTTP server for the auto-categorization engine.

Exposes the engine contract as JSON REST endpoints under /api/v1.
"""
import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware

from autocat.config import get
from autocat.gateway import gateway_routes
from autocat.logging_config import configure_logging, get_logger
from autocat.middleware import CorrelationIdMiddleware, ErrorBoundaryMiddleware

# Initialize centralized logging
LOG_LEVEL = get("app", "log_level").upper()
SERVICE_NAME = get("app", "service_name")
configure_logging(log_level=LOG_LEVEL, service=SERVICE_NAME, log_file=get("app", "log_file"))
logger = get_logger(SERVICE_NAME)


# =============================================================================
# Application Setup
# =============================================================================

middleware = [
    Middleware(CorrelationIdMiddleware),
    Middleware(ErrorBoundaryMiddleware),
]

app = Starlette(
    debug=False,
    routes=gateway_routes,
    middleware=middleware,
)

# Alias for the uvicorn command
asgi_app = app

if __name__ == "__main__":
    logger.info(f"Starting {SERVICE_NAME} on port {get('app', 'port')}")
    uvicorn.run(
        "main:asgi_app",
        host=get("app", "host"),
        port=get("app", "port"),
    )
