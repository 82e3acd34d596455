# eventcatalog_openapi/models/catalog_models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────────────────────
# Resource kinds (catalog collections)
# ─────────────────────────────────────────────────────────────
class ResourceKind(str, Enum):
    DOMAINS = "domains"
    SERVICES = "services"
    EVENTS = "events"
    COMMANDS = "commands"
    QUERIES = "queries"


class ReconcileOutcome(str, Enum):
    CREATED = "created"
    VERSIONED = "versioned"
    UPDATED = "updated"


# ─────────────────────────────────────────────────────────────
# Shared fragments
# ─────────────────────────────────────────────────────────────
class Badge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str
    text_color: str = Field(default="blue", alias="textColor")
    background_color: str = Field(default="blue", alias="backgroundColor")


class ResourceRef(BaseModel):
    """Pointer to another catalog record (sends / receives / domain services)."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    version: Optional[str] = None


class CatalogRecord(BaseModel):
    """
    Base for everything persisted in the catalog.
    Unknown front-matter keys are kept so hand-edited metadata survives a rewrite.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)

    id: str
    name: str
    version: str
    summary: Optional[str] = None
    markdown: str = ""

    def front_matter(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        data.pop("markdown", None)
        return data


# ─────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────
class Domain(CatalogRecord):
    services: List[ResourceRef] = Field(default_factory=list)


class Service(CatalogRecord):
    schema_path: Optional[str] = Field(default=None, alias="schemaPath")
    specifications: Dict[str, str] = Field(default_factory=dict)
    badges: List[Badge] = Field(default_factory=list)
    sends: List[ResourceRef] = Field(default_factory=list)
    receives: List[ResourceRef] = Field(default_factory=list)
    owners: Optional[List[Any]] = None
    repository: Optional[Dict[str, Any]] = None


class Message(CatalogRecord):
    """Event, command or query; the kind is the collection it is stored in."""
    schema_path: Optional[str] = Field(default=None, alias="schemaPath")
    badges: List[Badge] = Field(default_factory=list)


class SpecificationFile(BaseModel):
    key: str
    file_name: str
    content: str
    path: Optional[str] = None


RECORD_TYPES: Dict[ResourceKind, type[CatalogRecord]] = {
    ResourceKind.DOMAINS: Domain,
    ResourceKind.SERVICES: Service,
    ResourceKind.EVENTS: Message,
    ResourceKind.COMMANDS: Message,
    ResourceKind.QUERIES: Message,
}


def dedupe_refs(*groups: List[ResourceRef]) -> List[ResourceRef]:
    """Concatenate ref lists keeping the first occurrence of each id."""
    seen: set[str] = set()
    out: List[ResourceRef] = []
    for group in groups:
        for ref in group:
            if ref.id in seen:
                continue
            seen.add(ref.id)
            out.append(ref)
    return out
