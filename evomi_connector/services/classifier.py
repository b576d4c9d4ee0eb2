"""Classification of Evomi API responses into results or user-facing errors."""

import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from evomi_connector.errors import DomainError, TransportError

logger = logging.getLogger(__name__)

UNKNOWN_API_ERROR = "Unknown API error"
EMPTY_RESPONSE: Dict[str, Any] = {"success": True, "message": "Request completed"}


class ErrorRule(NamedTuple):
    """Maps a lower-cased API error message to a friendlier template.

    Templates may reference ``{url}`` (the scraped URL) and ``{api_message}``.
    """

    name: str
    matches: Callable[[str], bool]
    template: str


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda message: any(needle in message for needle in needles)


# Order matters: the first matching rule wins.
ERROR_RULES: List[ErrorRule] = [
    ErrorRule(
        "auth",
        _contains("invalid api key", "unauthorized"),
        "Invalid API key. Please check your Evomi API key in the credentials.",
    ),
    ErrorRule(
        "credits",
        _contains("insufficient credits"),
        "Insufficient credits in your Evomi account. Please add credits at https://my.evomi.com",
    ),
    ErrorRule(
        "rate_limit",
        _contains("rate limit"),
        "Rate limit exceeded. Please wait a moment and try again, "
        "or upgrade your plan for higher limits.",
    ),
    ErrorRule(
        "invalid_url",
        _contains("invalid url"),
        'The URL "{url}" could not be scraped. Please verify the URL is accessible.',
    ),
]

GENERIC_TEMPLATE = "Evomi API error: {api_message}"


def is_failure(payload: Any) -> bool:
    """Return *True* when *payload* carries the API's ``success: false`` marker."""
    return isinstance(payload, dict) and payload.get("success") is False


def extract_api_message(payload: Dict[str, Any]) -> Any:
    return payload.get("error") or payload.get("message") or UNKNOWN_API_ERROR


def match_rule(api_message: Any) -> Optional[ErrorRule]:
    if not isinstance(api_message, str):
        return None
    lowered = api_message.lower()
    for rule in ERROR_RULES:
        if rule.matches(lowered):
            return rule
    return None


def friendly_message(api_message: Any, url: str = "") -> str:
    """Render the user-facing message for a raw API error."""
    rule = match_rule(api_message)
    template = rule.template if rule else GENERIC_TEMPLATE
    return template.format(url=url, api_message=api_message)


def classify_response(payload: Any, url: str = "") -> Dict[str, Any]:
    """Return the output payload for a scrape response or raise :class:`DomainError`.

    Successful payloads pass through unchanged; an empty response is
    replaced with a synthetic ``{"success": true, ...}`` record.
    """
    if is_failure(payload):
        api_message = extract_api_message(payload)
        message = friendly_message(api_message, url)
        rule = match_rule(api_message)
        logger.warning(
            "Evomi API rejected %s (%s): %s", url, rule.name if rule else "generic", api_message
        )
        raise DomainError(message, api_message=str(api_message))

    if not payload:
        return dict(EMPTY_RESPONSE)

    return payload


def transport_error(exc: Exception, base_url: str) -> TransportError:
    """Wrap a network-level failure with a connectivity-focused message."""
    cause = str(exc) or type(exc).__name__
    return TransportError(
        f"Could not connect to the Evomi API at {base_url}: {cause}",
        cause=exc,
    )
