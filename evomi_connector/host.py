"""The workflow host as seen by the connector."""

from typing import Any, Dict, List, Mapping, Optional, Protocol

from evomi_connector.errors import CredentialsError
from evomi_connector.models.request import Credentials

CREDENTIAL_TYPE = "evomiApi"

# Parameters the host groups under an "Additional Fields" collection
ADDITIONAL_FIELDS = "additionalFields"


class ExecutionHost(Protocol):
    """What the connector needs from the host for one execution."""

    def get_input_data(self) -> List[Dict[str, Any]]:
        ...

    def get_node_parameter(self, name: str, item_index: int, default: Any = None) -> Any:
        ...

    def get_credentials(self, name: str) -> Credentials:
        ...

    def continue_on_fail(self) -> bool:
        ...


class StaticHost:
    """In-memory host: each input record carries its own parameter values.

    ``additionalFields`` may be given either as a nested mapping or by
    placing ``proxyCountry`` / ``waitSeconds`` directly on the record.
    """

    def __init__(
        self,
        items: List[Dict[str, Any]],
        credentials: Optional[Mapping[str, Credentials]] = None,
        continue_on_fail: bool = False,
    ) -> None:
        self._items = items
        self._credentials = dict(credentials or {})
        self._continue_on_fail = continue_on_fail

    def get_input_data(self) -> List[Dict[str, Any]]:
        return self._items

    def get_node_parameter(self, name: str, item_index: int, default: Any = None) -> Any:
        item = self._items[item_index]
        if name == ADDITIONAL_FIELDS and name not in item:
            return {
                key: item[key] for key in ("proxyCountry", "waitSeconds") if key in item
            }
        return item.get(name, default)

    def get_credentials(self, name: str) -> Credentials:
        try:
            return self._credentials[name]
        except KeyError:
            raise CredentialsError(f'No credentials of type "{name}" are configured.')

    def continue_on_fail(self) -> bool:
        return self._continue_on_fail
