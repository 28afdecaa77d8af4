"""Prompt Gateway Service - Quart Application Setup.

This is a lean entry point. Startup logic is delegated to startup_setup.py.
"""

from quart import Quart

from services.prompt_gateway_service.api.code_routes import code_bp, legacy_code_bp
from services.prompt_gateway_service.api.health_routes import health_bp
from services.prompt_gateway_service.api.process_routes import legacy_process_bp, process_bp
from services.prompt_gateway_service.api.upload_routes import legacy_upload_bp, upload_bp
from services.prompt_gateway_service.config import settings
from services.prompt_gateway_service.error_handlers import register_error_handlers
from services.prompt_gateway_service.middleware import setup_request_middleware
from services.prompt_gateway_service.startup_setup import (
    initialize_services,
    setup_dependency_injection,
    shutdown_services,
)


def register_blueprints(app: Quart) -> None:
    """Register versioned routes and the original ``/api/*`` paths."""
    app.register_blueprint(health_bp)
    app.register_blueprint(process_bp, url_prefix="/api/v1")
    app.register_blueprint(code_bp, url_prefix="/api/v1")
    app.register_blueprint(upload_bp, url_prefix="/api/v1")
    app.register_blueprint(legacy_process_bp, url_prefix="/api")
    app.register_blueprint(legacy_code_bp, url_prefix="/api")
    app.register_blueprint(legacy_upload_bp, url_prefix="/api")


def create_app() -> Quart:
    """Build the Quart application with routes, middleware and error handlers."""
    app = Quart(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.UPLOAD_MAX_BYTES + 1024 * 1024

    setup_request_middleware(app)
    register_error_handlers(app, settings.UPLOAD_MAX_BYTES)
    register_blueprints(app)
    setup_dependency_injection(app)

    @app.before_serving
    async def startup() -> None:
        """Initialize services on startup."""
        await initialize_services(app, settings)

    @app.after_serving
    async def shutdown() -> None:
        """Clean up services on shutdown."""
        await shutdown_services(app)

    return app


app = create_app()

if __name__ == "__main__":
    app.run(host=settings.HOST, port=settings.PORT)
