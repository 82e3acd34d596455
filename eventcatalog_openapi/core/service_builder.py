# eventcatalog_openapi/core/service_builder.py
from __future__ import annotations

from typing import Any, Dict

from slugify import slugify

from eventcatalog_openapi.core.spec_loader import spec_file_name
from eventcatalog_openapi.models import Badge, Service, ServiceSpec

OPENAPI_SPECIFICATION_KEY = "openapiPath"
SUMMARY_MAX_LENGTH = 150


def default_markdown(document: Dict[str, Any], file_name: str) -> str:
    info = document.get("info") or {}
    external_docs = document.get("externalDocs")

    parts = []
    if info.get("description"):
        parts.append(info["description"].rstrip())
    parts.append("## Architecture diagram\n<NodeGraph />")
    parts.append(f'## OpenAPI Specification\n<OpenAPI file="{file_name}"/>')
    if external_docs:
        parts.append(
            "## External documentation\n"
            f"- [{external_docs.get('description') or external_docs.get('url')}]({external_docs.get('url')})"
        )
    return "\n\n".join(parts) + "\n"


def get_summary(document: Dict[str, Any]) -> str:
    summary = (document.get("info") or {}).get("description") or ""
    return summary if len(summary) < SUMMARY_MAX_LENGTH else ""


def build_service(service_spec: ServiceSpec, document: Dict[str, Any]) -> Service:
    """Map a dereferenced document onto a fresh (not yet reconciled) service record."""
    info = document.get("info") or {}
    schema_path = spec_file_name(service_spec.path)
    return Service(
        id=service_spec.id or slugify(info.get("title", "")),
        version=str(info.get("version", "")),
        name=info.get("title", ""),
        summary=get_summary(document),
        schema_path=schema_path,
        specifications={OPENAPI_SPECIFICATION_KEY: schema_path},
        markdown=default_markdown(document, schema_path),
        badges=[Badge(content=tag["name"]) for tag in (document.get("tags") or []) if tag.get("name")],
    )
