# eventcatalog_openapi/core/message_builder.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from slugify import slugify

from eventcatalog_openapi.core.operations import get_schemas_for_operation
from eventcatalog_openapi.models import (
    Badge,
    Message,
    Operation,
    OperationParameter,
    RequestBodiesAndResponses,
)
from eventcatalog_openapi.models.openapi_models import (
    MESSAGE_ID_EXTENSION,
    MESSAGE_NAME_EXTENSION,
    MESSAGE_VERSION_EXTENSION,
)

REQUEST_BODY_FILE_NAME = "request-body.json"
SUMMARY_MAX_LENGTH = 150


def response_file_name(status_code: str) -> str:
    return f"response-{status_code}.json"


def is_schema_file_name(file_name: str) -> bool:
    """True for the files schema_files() generates next to a message."""
    if file_name == REQUEST_BODY_FILE_NAME:
        return True
    return file_name.startswith("response-") and file_name.endswith(".json")


def schema_files(schemas: Optional[RequestBodiesAndResponses]) -> Dict[str, str]:
    """File name -> pretty JSON for the request body and each response schema."""
    files: Dict[str, str] = {}
    if schemas is None:
        return files
    if schemas.request_body is not None:
        files[REQUEST_BODY_FILE_NAME] = json.dumps(schemas.request_body, indent=2)
    for status_code, response in schemas.responses.items():
        files[response_file_name(status_code)] = json.dumps(response.body, indent=2)
    return files


# ─────────────────────────────────────────────────────────────
# Markdown
# ─────────────────────────────────────────────────────────────
def markdown_for_parameters(parameters: List[OperationParameter]) -> str:
    lines = ["### Parameters"]
    for p in parameters:
        line = f"- **{p.name}** ({p.in_})"
        if p.required:
            line += " (required)"
        if p.description:
            line += f": {p.description}"
        lines.append(line)
    return "\n".join(lines)


def markdown_for_responses(schemas: RequestBodiesAndResponses) -> str:
    lines = ["### Responses"]
    for status_code, response in schemas.responses.items():
        lines.append(f"**{status_code} Response**")
        if response.is_schema:
            lines.append(
                f'<SchemaViewer file="{response_file_name(status_code)}" maxHeight="500" id="response-{status_code}" />'
            )
        else:
            lines.append("```json\n" + json.dumps(response.body, indent=2) + "\n```")
    return "\n".join(lines)


def default_markdown(operation: Operation, schemas: Optional[RequestBodiesAndResponses] = None) -> str:
    schemas = schemas or RequestBodiesAndResponses()
    parts = ["## Architecture\n<NodeGraph />"]

    if operation.description:
        parts.append(f"## Overview\n{operation.description.rstrip()}")
    if operation.external_docs:
        docs = operation.external_docs
        parts.append(f"## External documentation\n- [{docs.description or docs.url}]({docs.url})")

    parts.append(f"## {operation.method.upper()} `({operation.path})`")

    if schemas.parameters:
        parts.append(markdown_for_parameters(schemas.parameters))
    if schemas.request_body is not None:
        parts.append(
            f'### Request Body\n<SchemaViewer file="{REQUEST_BODY_FILE_NAME}" maxHeight="500" id="request-body" />'
        )
    parts.append(markdown_for_responses(schemas))
    return "\n\n".join(parts) + "\n"


def get_summary(operation: Operation) -> str:
    if operation.summary:
        return operation.summary
    description = operation.description or ""
    return description if len(description) < SUMMARY_MAX_LENGTH else ""


# ─────────────────────────────────────────────────────────────
# Identity
# ─────────────────────────────────────────────────────────────
def sanitize_path(path: str) -> str:
    """'/products/{productId}' -> 'products_{productId}'"""
    return path.replace("/", "", 1).replace("/", "_")


def unique_identifier(document: Dict[str, Any], operation: Operation) -> str:
    """operationId, or '<api-slug>_<METHOD>[_<sanitized path>]' when there is none."""
    if operation.operation_id:
        return operation.operation_id
    api_name = slugify((document.get("info") or {}).get("title", ""))
    identifier = f"{api_name}_{operation.method}"
    path = sanitize_path(operation.path)
    if path:
        identifier += f"_{path}"
    return identifier


def build_message(document: Dict[str, Any], operation: Operation) -> Tuple[Message, Optional[RequestBodiesAndResponses]]:
    """Map an operation onto a fresh message record plus the schema data to attach next to it."""
    schemas = get_schemas_for_operation(document, operation)
    extensions = operation.extensions
    identifier = unique_identifier(document, operation)

    badges = [Badge(content=operation.method.upper())]
    badges.extend(Badge(content=f"tag:{tag}") for tag in operation.tags)

    message = Message(
        id=str(extensions.get(MESSAGE_ID_EXTENSION) or identifier),
        version=str(extensions.get(MESSAGE_VERSION_EXTENSION) or (document.get("info") or {}).get("version", "")),
        name=str(extensions.get(MESSAGE_NAME_EXTENSION) or identifier),
        summary=get_summary(operation),
        markdown=default_markdown(operation, schemas),
        schema_path=REQUEST_BODY_FILE_NAME if schemas and schemas.request_body is not None else "",
        badges=badges,
    )
    return message, schemas
