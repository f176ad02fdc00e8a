from pydantic_settings import BaseSettings
from dotenv import load_dotenv

from core.cors import CorsPolicy

# Load environment variables from .env file
load_dotenv()

# Pydantic will automatically read from environment variables.
class Settings(BaseSettings):
    # Core App Settings
    PROJECT_NAME: str = "QPaperHub Ingestion API"
    LOG_LEVEL: str = "INFO"

    # CORS: the first explicit origin is echoed back for unknown callers
    CORS_ALLOWED_ORIGINS: list[str] = [
        "https://lovable.dev",
        "https://www.lovable.dev",
        "https://qpaperhub.vercel.app",
        "http://localhost:5173",
        "http://localhost:8080",
        "http://localhost:3000",
    ]
    CORS_ALLOWED_ORIGIN_SUFFIXES: list[str] = [
        ".lovableproject.com",
        ".lovable.app",
        ".vercel.app",
    ]

    # Object Storage Configuration (any S3-compatible endpoint)
    SPACES_REGION: str = "us-east-1"
    SPACES_NAME: str = "question-papers"
    SPACES_ENDPOINT: str
    ACCESS_KEY: str
    SECRET_KEY: str
    PUBLIC_BASE_URL: str | None = None

    # Upload limits
    MAX_TOTAL_UPLOAD_BYTES: int = 20 * 1024 * 1024
    CLEANUP_ON_FAILURE: bool = True

    # Identity: 'jwt' verifies tokens locally, 'remote' asks the auth service
    AUTH_MODE: str = "jwt"
    JWT_SECRET_KEY: str
    ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str | None = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    # AI chat gateway
    AI_GATEWAY_URL: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    AI_GATEWAY_API_KEY: str | None = None
    AI_MODEL: str = "google/gemini-2.5-flash"
    AI_MAX_TOKENS: int = 1024
    AI_TEMPERATURE: float = 0.7
    AI_TIMEOUT_SECONDS: float = 60.0

    @property
    def storage_public_base_url(self) -> str:
        if self.PUBLIC_BASE_URL:
            return self.PUBLIC_BASE_URL.rstrip("/")
        return f"{self.SPACES_ENDPOINT.rstrip('/')}/{self.SPACES_NAME}"

    def cors_policy(self) -> CorsPolicy:
        return CorsPolicy(
            allowed_origins=tuple(self.CORS_ALLOWED_ORIGINS),
            allowed_suffixes=tuple(self.CORS_ALLOWED_ORIGIN_SUFFIXES),
        )

settings = Settings()
