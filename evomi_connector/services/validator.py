"""Validation and normalization of per-record scrape parameters."""

import logging
import math
import re
from typing import Annotated, Any, Optional

from pydantic import AnyUrl, TypeAdapter, UrlConstraints, ValidationError

from evomi_connector.errors import ScrapeValidationError, ValidationReason
from evomi_connector.models.params import (
    DEFAULT_WAIT_SECONDS,
    MAX_WAIT_SECONDS,
    MIN_WAIT_SECONDS,
    MODES,
    OUTPUTS,
    WAITING_MODES,
    ScrapeOptions,
    ScrapeRequestParams,
)

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http://", "https://")
SUPPORTED_OPERATIONS = {("webPage", "scrape")}

_COUNTRY_CODE_RE = re.compile(r"^[A-Z]{2}$")
# http(s) with a host; unlike HttpUrl there is no 2083-character length limit
_HTTP_URL = TypeAdapter(
    Annotated[AnyUrl, UrlConstraints(allowed_schemes=["http", "https"], host_required=True)]
)


def validate_url(raw: Optional[str]) -> str:
    """Return the trimmed URL or raise :class:`ScrapeValidationError`.

    The trimmed input is returned as-is rather than pydantic's normalized
    form, so the API sees exactly what the user typed.
    """
    url = (raw or "").strip()
    if not url:
        raise ScrapeValidationError(
            ValidationReason.EMPTY_URL,
            "URL is required. Please enter a valid URL to scrape.",
        )

    if not url.startswith(ALLOWED_SCHEMES):
        raise ScrapeValidationError(
            ValidationReason.BAD_SCHEME,
            f'Invalid URL format: "{url}". URL must start with http:// or https://',
        )

    try:
        _HTTP_URL.validate_python(url)
    except ValidationError:
        raise ScrapeValidationError(
            ValidationReason.MALFORMED_URL,
            f'Invalid URL: "{url}". Please enter a properly formatted URL (e.g., https://example.com)',
        )

    return url


def normalize_mode(raw: Any) -> str:
    """Unknown modes fall back to ``auto`` instead of failing."""
    if raw in MODES:
        return raw
    logger.debug("Unknown mode %r – defaulting to auto", raw)
    return "auto"


def validate_output(raw: Any) -> str:
    if raw not in OUTPUTS:
        raise ScrapeValidationError(
            ValidationReason.BAD_OUTPUT,
            f'Invalid output format: "{raw}". Use one of: {", ".join(OUTPUTS)}',
        )
    return raw


def normalize_proxy_country(raw: Optional[str]) -> Optional[str]:
    """Return the uppercased 2-letter code, or *None* when no proxy country is set."""
    country = (raw or "").strip().upper()
    if not country:
        return None
    if not _COUNTRY_CODE_RE.match(country):
        raise ScrapeValidationError(
            ValidationReason.BAD_COUNTRY_CODE,
            f'Invalid proxy country code: "{country}". '
            "Please use a 2-letter ISO country code (e.g., US, CA, DE, GB)",
        )
    return country


def clamp_wait_seconds(raw: Any) -> int:
    """Clamp *raw* into [0, 30]; out-of-range values are clamped, not rejected."""
    if raw is None or raw == "":
        return DEFAULT_WAIT_SECONDS

    try:
        if isinstance(raw, bool):
            raise TypeError("booleans are not a duration")
        value = float(raw)
        if math.isnan(value):
            raise ValueError("NaN")
    except (TypeError, ValueError):
        raise ScrapeValidationError(
            ValidationReason.BAD_WAIT_SECONDS,
            f'Invalid wait seconds: "{raw}". Please enter a number between '
            f"{MIN_WAIT_SECONDS} and {MAX_WAIT_SECONDS}",
        )

    return int(max(MIN_WAIT_SECONDS, min(MAX_WAIT_SECONDS, value)))


def normalize(params: ScrapeRequestParams) -> ScrapeOptions:
    """Validate *params* and return the canonical :class:`ScrapeOptions`.

    Checks run in a fixed order (operation, URL, output, proxy country,
    wait seconds) so the first problem found is the one reported. Wait
    seconds are only read for modes that render the page.

    Raises:
        ScrapeValidationError: on the first invalid parameter.
    """
    if (params.resource, params.operation) not in SUPPORTED_OPERATIONS:
        raise ScrapeValidationError(
            ValidationReason.UNSUPPORTED_OPERATION,
            f'The operation "{params.operation}" is not supported for resource "{params.resource}"',
        )

    url = validate_url(params.url)
    mode = normalize_mode(params.mode)
    output = validate_output(params.output)

    # Screenshots need a rendering engine upstream
    if output == "screenshot" and mode != "browser":
        mode = "browser"

    proxy_country = normalize_proxy_country(params.proxy_country)
    if mode in WAITING_MODES:
        wait_seconds = clamp_wait_seconds(params.wait_seconds)
    else:
        wait_seconds = DEFAULT_WAIT_SECONDS

    return ScrapeOptions(
        url=url,
        mode=mode,
        output=output,
        include_content=params.include_content,
        wait_seconds=wait_seconds,
        proxy_country=proxy_country,
    )
