import logging

from fastapi import APIRouter, HTTPException

from evomi_connector.config import get_settings
from evomi_connector.errors import DomainError, TransportError
from evomi_connector.models.response import CredentialTestResponse
from evomi_connector.routers.scrape import configured_credentials
from evomi_connector.services.classifier import match_rule
from evomi_connector.services.client import EvomiClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/credentials", tags=["Credentials"])


@router.get("/test", response_model=CredentialTestResponse, summary="Test the Evomi API key")
async def test_credentials() -> CredentialTestResponse:
    """Call the Evomi health endpoint with the configured key."""
    credentials = configured_credentials()
    try:
        async with EvomiClient(credentials, timeout=get_settings().timeout) as client:
            await client.health_check()
    except DomainError as exc:
        rule = match_rule(exc.api_message)
        status_code = 401 if rule and rule.name == "auth" else 502
        logger.warning("Credential test failed: %s", exc.message)
        raise HTTPException(status_code=status_code, detail=exc.message)
    except TransportError as exc:
        raise HTTPException(status_code=502, detail=exc.message)

    return CredentialTestResponse()
