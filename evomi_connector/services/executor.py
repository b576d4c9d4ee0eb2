"""Batch execution: one scrape per input record, with failure isolation."""

import logging
from typing import Any, Dict, List, Optional

from evomi_connector.config import Settings, get_settings
from evomi_connector.errors import ConnectorError, NodeOperationError, UnexpectedError
from evomi_connector.host import ADDITIONAL_FIELDS, CREDENTIAL_TYPE, ExecutionHost
from evomi_connector.models.params import DEFAULT_WAIT_SECONDS, ScrapeRequestParams
from evomi_connector.models.response import FailureRecord, ItemResult
from evomi_connector.services.classifier import classify_response
from evomi_connector.services.client import EvomiClient
from evomi_connector.services.request_builder import build_request
from evomi_connector.services.validator import normalize

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def read_params(host: ExecutionHost, item_index: int) -> ScrapeRequestParams:
    """Collect the raw parameter values of record *item_index* from the host."""
    additional: Dict[str, Any] = host.get_node_parameter(ADDITIONAL_FIELDS, item_index, {}) or {}
    return ScrapeRequestParams(
        resource=host.get_node_parameter("resource", item_index, "webPage"),
        operation=host.get_node_parameter("operation", item_index, "scrape"),
        url=host.get_node_parameter("url", item_index, ""),
        mode=host.get_node_parameter("mode", item_index, "auto"),
        output=host.get_node_parameter("output", item_index, "json"),
        include_content=host.get_node_parameter("includeContent", item_index, False),
        wait_seconds=additional.get("waitSeconds", DEFAULT_WAIT_SECONDS),
        proxy_country=additional.get("proxyCountry", ""),
    )


def error_message(exc: Exception) -> str:
    """Return the single user-facing message for a failed record."""
    if isinstance(exc, (ConnectorError, NodeOperationError)):
        return exc.message
    return UnexpectedError(str(exc) or UNEXPECTED_ERROR_MESSAGE, cause=exc).message


async def scrape_item(
    host: ExecutionHost, client: EvomiClient, item_index: int, integration: str
) -> Dict[str, Any]:
    """Validate → build → invoke → classify for a single record."""
    options = normalize(read_params(host, item_index))
    descriptor = build_request(options, client.credentials, integration)

    logger.info(
        "Scrape request",
        extra={
            "url": options.url,
            "mode": options.mode,
            "output": options.output,
            "item_index": item_index,
        },
    )
    payload = await client.scrape(descriptor)
    return classify_response(payload, options.url)


async def execute(
    host: ExecutionHost,
    client: Optional[EvomiClient] = None,
    settings: Optional[Settings] = None,
) -> List[ItemResult]:
    """Run the scrape operation over every input record of *host*.

    Records are processed one at a time, in order. When the host's
    continue-on-failure flag is set, a failed record yields
    ``{"success": false, "error": ..., "itemIndex": i}`` and processing goes on;
    otherwise the first failure aborts the batch.

    Raises:
        CredentialsError: if the host has no Evomi credentials (in both modes).
        NodeOperationError: on the first failed record in fail-fast mode.
    """
    settings = settings or get_settings()
    items = host.get_input_data()
    credentials = host.get_credentials(CREDENTIAL_TYPE)
    continue_on_fail = host.continue_on_fail()

    results: List[ItemResult] = []
    async with client or EvomiClient(credentials, timeout=settings.timeout) as evomi:
        for index in range(len(items)):
            try:
                payload = await scrape_item(host, evomi, index, settings.integration)
            except Exception as exc:
                message = error_message(exc)
                if not continue_on_fail:
                    logger.error("Item %d failed, aborting batch: %s", index, message)
                    raise NodeOperationError(message, item_index=index) from exc

                logger.warning("Item %d failed, continuing: %s", index, message)
                failure = FailureRecord(error=message, item_index=index)
                results.append(
                    ItemResult(payload=failure.model_dump(by_alias=True), paired_item=index)
                )
                continue

            results.append(ItemResult(payload=payload, paired_item=index))

    return results
