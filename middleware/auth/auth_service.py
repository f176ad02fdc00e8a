import logging
from datetime import datetime, timedelta, timezone

import httpx
from jose import jwt, JWTError

from core.config import settings
from core.errors import Unauthorized
from schemas.auth_schema import Principal

logger = logging.getLogger(__name__)


class JWTIdentityResolver:
    """Verifies tokens locally against the shared signing secret."""

    def __init__(self, secret_key: str, algorithm: str, audience: str | None = None):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.audience = audience

    async def resolve(self, token: str) -> Principal:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as e:
            logger.error(f"User authentication failed: {e}")
            raise Unauthorized()

        principal_id = payload.get("sub")
        if not principal_id:
            logger.error("User authentication failed: token has no subject")
            raise Unauthorized()

        return Principal(id=str(principal_id), email=payload.get("email"), role=payload.get("role"))


class RemoteIdentityResolver:
    """Asks the hosted auth service who the bearer token belongs to."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.user_url = f"{base_url.rstrip('/')}/auth/v1/user"
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def resolve(self, token: str) -> Principal:
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {token}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.user_url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"User authentication failed: auth service unreachable: {e}")
            raise Unauthorized()

        if response.status_code != 200:
            logger.error(f"User authentication failed: auth service returned {response.status_code}")
            raise Unauthorized()

        user = response.json()
        if not user.get("id"):
            logger.error("User authentication failed: auth service returned no user")
            raise Unauthorized()

        return Principal(id=str(user["id"]), email=user.get("email"), role=user.get("role"))


def get_identity_resolver():
    """FastAPI dependency selecting the resolver configured by AUTH_MODE."""
    if settings.AUTH_MODE == "remote":
        if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
            raise RuntimeError("AUTH_MODE=remote requires SUPABASE_URL and SUPABASE_ANON_KEY")
        return RemoteIdentityResolver(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)

    return JWTIdentityResolver(settings.JWT_SECRET_KEY, settings.ALGORITHM, settings.JWT_AUDIENCE)


def create_access_token(principal_id: str, email: str | None = None, expires_delta: timedelta | None = None) -> str:
    """Creates a token that JWTIdentityResolver accepts."""
    encode = {"sub": principal_id, "role": "authenticated"}
    if email:
        encode["email"] = email
    if settings.JWT_AUDIENCE:
        encode["aud"] = settings.JWT_AUDIENCE

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    encode.update({"exp": datetime.now(timezone.utc) + expires_delta})

    return jwt.encode(encode, settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM)
