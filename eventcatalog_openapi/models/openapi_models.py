# eventcatalog_openapi/models/openapi_models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

EXTENSION_PREFIX = "x-eventcatalog-"
MESSAGE_TYPE_EXTENSION = "x-eventcatalog-message-type"
MESSAGE_ACTION_EXTENSION = "x-eventcatalog-message-action"
MESSAGE_ID_EXTENSION = "x-eventcatalog-message-id"
MESSAGE_NAME_EXTENSION = "x-eventcatalog-message-name"
MESSAGE_VERSION_EXTENSION = "x-eventcatalog-message-version"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


class MessageType(str, Enum):
    EVENT = "event"
    COMMAND = "command"
    QUERY = "query"


class MessageAction(str, Enum):
    SENDS = "sends"
    RECEIVES = "receives"


DEFAULT_MESSAGE_TYPE = MessageType.QUERY


class ExternalDocs(BaseModel):
    url: str
    description: Optional[str] = None


class Operation(BaseModel):
    """One HTTP method on one path, as extracted from the document (never persisted)."""
    path: str
    method: str                                   # upper-cased verb
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    type: MessageType = DEFAULT_MESSAGE_TYPE
    action: MessageAction = MessageAction.RECEIVES
    tags: List[str] = Field(default_factory=list)
    external_docs: Optional[ExternalDocs] = None
    extensions: Dict[str, Any] = Field(default_factory=dict)


class OperationParameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    in_: str = Field(alias="in")
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[Dict[str, Any]] = Field(default=None, alias="schema")


class ResponseSchema(BaseModel):
    """Schema (or, when the content has none, the raw content entry) of one status code."""
    body: Any = None
    is_schema: bool = False


class RequestBodiesAndResponses(BaseModel):
    parameters: List[OperationParameter] = Field(default_factory=list)
    request_body: Optional[Any] = None
    responses: Dict[str, ResponseSchema] = Field(default_factory=dict)
