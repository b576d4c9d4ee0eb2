"""Deterministic construction of Evomi Scraper API requests."""

from typing import Any, Dict

from evomi_connector.models.params import WAITING_MODES, ScrapeOptions
from evomi_connector.models.request import Credentials, RequestDescriptor

REALTIME_PATH = "/api/v1/scraper/realtime"
HEALTH_PATH = "/api/v1/scraper/health"

# Output format → upstream delivery selector plus its companion fields
_OUTPUT_FIELDS: Dict[str, Dict[str, Any]] = {
    "json": {"delivery": "json"},
    "markdown": {"delivery": "raw", "content": "markdown"},
    "screenshot": {"delivery": "raw", "screenshot": True},
}


def build_request_body(options: ScrapeOptions) -> Dict[str, Any]:
    """Return the JSON body for *options*.

    The field set depends only on ``(mode, output)``:

    * ``url`` and ``mode`` are always present.
    * ``proxy_country`` only when a country was given.
    * ``json`` → ``delivery=json`` + ``include_content``;
      ``markdown`` → ``delivery=raw`` + ``content=markdown``;
      ``screenshot`` → ``delivery=raw`` + ``screenshot=true``.
    * ``wait_seconds`` only for ``auto`` and ``browser``.
    """
    body: Dict[str, Any] = {"url": options.url, "mode": options.mode}

    if options.proxy_country:
        body["proxy_country"] = options.proxy_country

    body.update(_OUTPUT_FIELDS[options.output])
    if options.output == "json":
        body["include_content"] = options.include_content

    if options.mode in WAITING_MODES:
        body["wait_seconds"] = options.wait_seconds

    return body


def build_headers(integration: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-integration": integration,
    }


def build_request(
    options: ScrapeOptions, credentials: Credentials, integration: str = "n8n"
) -> RequestDescriptor:
    """Assemble the realtime-scrape call for *options*.

    Authentication is left to :meth:`EvomiClient.authenticate` so the
    descriptor can be logged safely.
    """
    return RequestDescriptor(
        method="POST",
        url=f"{credentials.base_url}{REALTIME_PATH}",
        headers=build_headers(integration),
        body=build_request_body(options),
    )
