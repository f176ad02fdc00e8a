from fastapi import FastAPI
import logging

from core.config import Settings, settings as default_settings
from core.cors import CorsPolicy, cors_middleware
from core.errors import register_exception_handlers
from routers import chat_router, upload_router

def create_application(settings: Settings | None = None, cors_policy: CorsPolicy | None = None) -> FastAPI:
    """
    Creates and configures the FastAPI application instance.
    """
    settings = settings or default_settings
    cors_policy = cors_policy or settings.cors_policy()

    # 1. Logging
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(title=settings.PROJECT_NAME)

    # 2. CORS: preflight answered here, headers stamped on every response
    app.middleware("http")(cors_middleware(cors_policy))

    # 3. Error responses as {"error": ...}
    register_exception_handlers(app)

    # 4. Include Routers
    app.include_router(upload_router.router)
    app.include_router(chat_router.router)

    # 5. Root & Health Check Endpoint
    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {
            "message": f"{settings.PROJECT_NAME} is running",
            "status": "healthy",
            "storage_configured": bool(settings.SPACES_NAME and settings.ACCESS_KEY),
            "auth_mode": settings.AUTH_MODE,
            "ai_configured": bool(settings.AI_GATEWAY_API_KEY),
        }

    logging.info(f"{settings.PROJECT_NAME} configured (auth mode: {settings.AUTH_MODE}, bucket: {settings.SPACES_NAME})")
    return app
