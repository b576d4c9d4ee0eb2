from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from evomi_connector.config import DEFAULT_BASE_URL


class Credentials(BaseModel):
    """Evomi API credentials as stored by the host.

    ``api_key`` is a :class:`~pydantic.SecretStr` so it is masked in reprs
    and logs; read it with ``get_secret_value()`` only when sending.
    """

    api_key: SecretStr
    base_url: str = DEFAULT_BASE_URL

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: Any) -> str:
        value = (value or "").strip().rstrip("/")
        return value or DEFAULT_BASE_URL


class RequestDescriptor(BaseModel):
    """One fully built API call. Never carries the API key."""

    model_config = ConfigDict(frozen=True)

    method: Literal["GET", "POST"]
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
