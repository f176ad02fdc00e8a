import logging
from typing import Annotated

from fastapi import Depends, Request

from core.errors import Unauthorized
from middleware.auth.auth_service import get_identity_resolver
from schemas.auth_schema import Principal

logger = logging.getLogger(__name__)


def get_bearer_token(request: Request) -> str:
    """
    Reads the bearer credential from the Authorization header.
    Runs before the request body is touched.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        logger.error("Missing authorization header")
        raise Unauthorized("Missing authorization header")

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        logger.error("Malformed authorization header")
        raise Unauthorized()

    return token.strip()


async def get_current_principal(
    token: Annotated[str, Depends(get_bearer_token)],
    resolver=Depends(get_identity_resolver),
) -> Principal:
    """
    Resolves the bearer token to a principal.
    Raises 401 if the identity service does not recognise it.
    """
    principal = await resolver.resolve(token)
    logger.info(f"Authenticated user: {principal.id}")
    return principal

# Dependency for routes that require authentication
principal_dependency = Annotated[Principal, Depends(get_current_principal)]
