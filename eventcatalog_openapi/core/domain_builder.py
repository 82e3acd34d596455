# eventcatalog_openapi/core/domain_builder.py
from __future__ import annotations

from eventcatalog_openapi.models import Domain, DomainSpec


def default_markdown() -> str:
    return "## Architecture diagram\n<NodeGraph />\n"


def build_domain(domain_spec: DomainSpec) -> Domain:
    return Domain(
        id=domain_spec.id,
        name=domain_spec.name,
        version=domain_spec.version,
        markdown=default_markdown(),
    )
