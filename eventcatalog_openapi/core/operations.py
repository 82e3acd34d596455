# eventcatalog_openapi/core/operations.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from eventcatalog_openapi.models import (
    DEFAULT_MESSAGE_TYPE,
    MessageAction,
    MessageType,
    Operation,
    OperationParameter,
    RequestBodiesAndResponses,
    ResponseSchema,
)
from eventcatalog_openapi.models.openapi_models import (
    EXTENSION_PREFIX,
    HTTP_METHODS,
    MESSAGE_ACTION_EXTENSION,
    MESSAGE_TYPE_EXTENSION,
)

logger = logging.getLogger("eventcatalog_openapi.core.operations")


def _iter_operations(document: Dict[str, Any]) -> Iterator[Tuple[str, str, Dict[str, Any], Dict[str, Any]]]:
    """Yield (path, method, operation, path_item) in declaration order; non-verb keys are skipped."""
    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method, op in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(op, dict):
                continue
            yield path, method, op, path_item


def _message_type(raw: Any, *, path: str, method: str) -> MessageType:
    if raw is None:
        return DEFAULT_MESSAGE_TYPE
    try:
        return MessageType(str(raw).strip().lower())
    except ValueError:
        logger.warning(
            "Unknown %s %r on %s %s, using %s",
            MESSAGE_TYPE_EXTENSION, raw, method.upper(), path, DEFAULT_MESSAGE_TYPE.value,
        )
        return DEFAULT_MESSAGE_TYPE


def get_operations(document: Dict[str, Any]) -> List[Operation]:
    """
    Flatten the path/method tree into operations tagged with a message type and action.
    Extraction problems never abort the run: they are logged and yield [].
    """
    try:
        operations: List[Operation] = []
        for path, method, op, _ in _iter_operations(document):
            action = (
                MessageAction.SENDS
                if op.get(MESSAGE_ACTION_EXTENSION) == MessageAction.SENDS.value
                else MessageAction.RECEIVES
            )
            extensions = {k: v for k, v in op.items() if k.startswith(EXTENSION_PREFIX)}
            operations.append(
                Operation(
                    path=path,
                    method=method.upper(),
                    operation_id=op.get("operationId"),
                    summary=op.get("summary"),
                    description=op.get("description"),
                    type=_message_type(op.get(MESSAGE_TYPE_EXTENSION), path=path, method=method),
                    action=action,
                    tags=list(op.get("tags") or []),
                    external_docs=op.get("externalDocs"),
                    extensions=extensions,
                )
            )
        return operations
    except Exception:
        logger.error("Error parsing OpenAPI document", exc_info=True)
        return []


# ─────────────────────────────────────────────────────────────
# Request bodies / responses
# ─────────────────────────────────────────────────────────────
def _first_content(content: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not content:
        return None
    first = next(iter(content.values()))
    return first if isinstance(first, dict) else None


def _collect_schemas(op: Dict[str, Any], path_item: Dict[str, Any]) -> RequestBodiesAndResponses:
    schemas = RequestBodiesAndResponses()

    # operation-level parameters override path-level ones with the same name + location
    params: Dict[Tuple[str, str], Dict[str, Any]] = {}
    for p in list(path_item.get("parameters") or []) + list(op.get("parameters") or []):
        if isinstance(p, dict) and "name" in p and "in" in p:
            params[(p["name"], p["in"])] = p
    schemas.parameters = [OperationParameter.model_validate(p) for p in params.values()]

    body = op.get("requestBody") or {}
    body_content = _first_content(body.get("content"))
    if body_content is not None:
        schemas.request_body = body_content.get("schema")

    for status_code, response in (op.get("responses") or {}).items():
        if not isinstance(response, dict):
            continue
        content = _first_content(response.get("content"))
        if content is None:
            continue
        schema = content.get("schema")
        schemas.responses[str(status_code)] = ResponseSchema(
            body=schema if schema is not None else content,
            is_schema=schema is not None,
        )
    return schemas


def get_schemas_by_operation_id(document: Dict[str, Any], operation_id: Optional[str]) -> Optional[RequestBodiesAndResponses]:
    """Parameters, request body and per-status responses for the operation with this id (None if absent)."""
    for _, _, op, path_item in _iter_operations(document):
        if operation_id and op.get("operationId") == operation_id:
            return _collect_schemas(op, path_item)
    logger.warning('Operation with ID "%s" not found.', operation_id)
    return None


def get_schemas_for_operation(document: Dict[str, Any], operation: Operation) -> Optional[RequestBodiesAndResponses]:
    """Lookup by operationId, or by path + method when the operation has no id."""
    if operation.operation_id:
        return get_schemas_by_operation_id(document, operation.operation_id)
    for path, method, op, path_item in _iter_operations(document):
        if path == operation.path and method.upper() == operation.method:
            return _collect_schemas(op, path_item)
    return None
