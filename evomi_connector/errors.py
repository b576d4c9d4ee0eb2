"""Error taxonomy for the Evomi connector."""

from enum import Enum


class ConnectorError(Exception):
    """Base for every error the connector classifies itself."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationReason(str, Enum):
    EMPTY_URL = "empty_url"
    BAD_SCHEME = "bad_scheme"
    MALFORMED_URL = "malformed_url"
    BAD_OUTPUT = "bad_output"
    BAD_COUNTRY_CODE = "bad_country_code"
    BAD_WAIT_SECONDS = "bad_wait_seconds"
    UNSUPPORTED_OPERATION = "unsupported_operation"


class ScrapeValidationError(ConnectorError):
    """Local pre-flight failure; raised before any network call."""

    def __init__(self, reason: ValidationReason, message: str):
        super().__init__(message)
        self.reason = reason


class TransportError(ConnectorError):
    """The API could not be reached (DNS, timeout, refused connection, ...)."""


class DomainError(ConnectorError):
    """The API answered with ``success: false``."""

    def __init__(self, message: str, api_message: str = ""):
        super().__init__(message)
        self.api_message = api_message


class UnexpectedError(ConnectorError):
    pass


class CredentialsError(ConnectorError):
    """Credentials are missing or unusable."""


class NodeOperationError(Exception):
    """Operation failure surfaced to the host, tied to the offending record."""

    def __init__(self, message: str, item_index: int):
        super().__init__(message)
        self.message = message
        self.item_index = item_index
