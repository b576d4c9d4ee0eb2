from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

Mode = Literal["auto", "request", "browser"]
Output = Literal["json", "markdown", "screenshot"]

MODES = get_args(Mode)
OUTPUTS = get_args(Output)

# Modes that run a renderer upstream and therefore honour wait_seconds
WAITING_MODES = ("auto", "browser")

DEFAULT_WAIT_SECONDS = 5
MIN_WAIT_SECONDS = 0
MAX_WAIT_SECONDS = 30


class ScrapeRequestParams(BaseModel):
    """Raw parameter values for one input record, as the host hands them over."""

    resource: str = "webPage"
    operation: str = "scrape"
    url: Optional[str] = ""
    mode: Any = "auto"
    output: Any = "json"
    include_content: bool = False
    wait_seconds: Any = DEFAULT_WAIT_SECONDS
    proxy_country: Optional[str] = ""


class ScrapeOptions(BaseModel):
    """Validated, normalized parameters; the only input of the body builder."""

    model_config = ConfigDict(frozen=True)

    url: str
    mode: Mode = "auto"
    output: Output = "json"
    include_content: bool = False
    wait_seconds: int = Field(default=DEFAULT_WAIT_SECONDS, ge=MIN_WAIT_SECONDS, le=MAX_WAIT_SECONDS)
    proxy_country: Optional[str] = Field(default=None, pattern=r"^[A-Z]{2}$")
