from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


class FailureRecord(BaseModel):
    """Payload emitted in place of a result when continue-on-failure is active."""

    success: Literal[False] = False
    error: str
    item_index: int = Field(serialization_alias="itemIndex")


class ItemResult(BaseModel):
    payload: Dict[str, Any] = Field(serialization_alias="json")
    paired_item: int = Field(serialization_alias="pairedItem")
    """Index of the input record this result was produced from."""


class ScrapeBatchRequest(BaseModel):
    items: List[Dict[str, Any]] = Field(
        min_length=1,
        description="One parameter set per record (url, mode, output, includeContent, additionalFields).",
    )
    continue_on_fail: bool = Field(
        default=False,
        description="Emit a failure record per failed item instead of aborting the batch.",
    )


class ScrapeBatchResponse(BaseModel):
    items: List[ItemResult]


class CredentialTestResponse(BaseModel):
    status: Literal["OK"] = "OK"
    message: str = "Connection successful"
