import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from evomi_connector.config import get_settings
from evomi_connector.errors import NodeOperationError
from evomi_connector.host import CREDENTIAL_TYPE, StaticHost
from evomi_connector.models.request import Credentials
from evomi_connector.models.response import ScrapeBatchRequest, ScrapeBatchResponse
from evomi_connector.services.executor import execute

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


def configured_credentials() -> Credentials:
    """Build the Evomi credentials from settings or fail with HTTP 503."""
    settings = get_settings()
    if settings.api_key is None or not settings.api_key.get_secret_value():
        logger.error("Evomi API key is not configured")
        raise HTTPException(status_code=503, detail="Evomi API credentials are not configured.")
    return Credentials(api_key=settings.api_key, base_url=settings.base_url)


@router.post("/scrape", response_model=ScrapeBatchResponse, summary="Scrape a batch of web pages")
@limiter.limit(get_settings().rate_limit)
async def scrape(request: Request, body: ScrapeBatchRequest) -> ScrapeBatchResponse:
    """Run the Evomi scrape operation once per item in *body*.

    Each item carries ``url``, ``mode`` (``auto`` / ``request`` / ``browser``),
    ``output`` (``json`` / ``markdown`` / ``screenshot``), ``includeContent``
    and optionally ``additionalFields`` (``proxyCountry``, ``waitSeconds``).

    With ``continue_on_fail`` a failing item yields a failure record in its
    slot; without it the first failure returns HTTP 400 with the item index.
    """
    logger.info(
        "Scrape batch received",
        extra={"items": len(body.items), "continue_on_fail": body.continue_on_fail},
    )
    host = StaticHost(
        body.items,
        credentials={CREDENTIAL_TYPE: configured_credentials()},
        continue_on_fail=body.continue_on_fail,
    )

    try:
        results = await execute(host)
    except NodeOperationError as exc:
        raise HTTPException(
            status_code=400,
            detail={"message": exc.message, "item_index": exc.item_index},
        )

    return ScrapeBatchResponse(items=results)
