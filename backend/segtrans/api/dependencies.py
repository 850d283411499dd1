"""API dependencies for authentication and engine wiring.

This module provides:
- Optional API key authentication for network-exposed deployments
- Per-request construction of the model client and translation service
- The page store used for best-effort result persistence
"""

import logging
import secrets
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Header

from segtrans.config import Settings, settings
from segtrans.core.errors import ConfigurationError
from segtrans.core.storage import PageStore
from segtrans.core.translation import GatewayFactory, ModelClient, TranslationService
from segtrans.models.database.base import async_session_maker

logger = logging.getLogger(__name__)


# =============================================================================
# Authentication Dependencies
# =============================================================================


def get_settings() -> Settings:
    """Application settings (overridable in tests)."""
    return settings


async def verify_api_token(
    authorization: Annotated[Optional[str], Header()] = None,
    x_api_key: Annotated[Optional[str], Header(alias="X-API-Key")] = None,
    app_settings: Settings = Depends(get_settings),
) -> bool:
    """Verify API token for protected endpoints.

    Supports two authentication methods:
    1. Authorization: Bearer <token>
    2. X-API-Key: <token>

    If API_AUTH_TOKEN is not set in environment, authentication is disabled
    (for local development).

    Raises:
        HTTPException: 401 if auth is required but token is invalid/missing
    """
    if not app_settings.api_auth_token:
        return True

    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:]
    elif x_api_key:
        token = x_api_key

    if not token:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide Authorization: Bearer <token> or X-API-Key header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Constant-time comparison
    if not secrets.compare_digest(token, app_settings.api_auth_token):
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return True


async def verify_api_token_if_configured(
    authorization: Annotated[Optional[str], Header()] = None,
    x_api_key: Annotated[Optional[str], Header(alias="X-API-Key")] = None,
    app_settings: Settings = Depends(get_settings),
) -> bool:
    """Verify API token only if require_auth_all is enabled."""
    if not app_settings.require_auth_all:
        return True
    return await verify_api_token(authorization, x_api_key, app_settings)


# Type aliases for cleaner dependency injection
RequireAuth = Annotated[bool, Depends(verify_api_token)]
OptionalAuth = Annotated[bool, Depends(verify_api_token_if_configured)]


# =============================================================================
# Engine Dependencies
# =============================================================================


def _create_model_client(app_settings: Settings) -> ModelClient:
    return GatewayFactory.create(
        provider=app_settings.llm_provider,
        api_key=app_settings.resolved_api_key,
        model=app_settings.llm_model,
        base_url=app_settings.llm_base_url,
        max_attempts=app_settings.llm_max_attempts,
    )


def get_model_client(app_settings: Settings = Depends(get_settings)) -> ModelClient:
    """Build the model client for this request.

    Raises:
        HTTPException: 500 if the client is not configured, before any
            chunk work starts
    """
    try:
        return _create_model_client(app_settings)
    except ConfigurationError as e:
        logger.error("Model client configuration error: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


def get_optional_model_client(
    app_settings: Settings = Depends(get_settings),
) -> Optional[ModelClient]:
    """Model client, or None when no credential is configured."""
    try:
        return _create_model_client(app_settings)
    except ConfigurationError:
        return None


def get_translation_service(
    client: ModelClient = Depends(get_model_client),
    app_settings: Settings = Depends(get_settings),
) -> TranslationService:
    """Translation service bound to this request's model client."""
    return TranslationService.from_settings(client, app_settings)


def get_page_store(app_settings: Settings = Depends(get_settings)) -> Optional[PageStore]:
    """Page store, or None when persistence is disabled."""
    if not app_settings.persist_results:
        return None
    return PageStore(async_session_maker)
