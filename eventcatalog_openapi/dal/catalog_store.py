# eventcatalog_openapi/dal/catalog_store.py
from __future__ import annotations

from typing import List, Optional, Protocol

from eventcatalog_openapi.models import (
    CatalogRecord,
    ResourceKind,
    ResourceRef,
    SpecificationFile,
)

LATEST = "latest"


def is_latest(version: Optional[str]) -> bool:
    return version is None or version == LATEST


class CatalogStore(Protocol):
    """
    Capabilities the reconciler needs from the catalog, per resource kind.
    `version=None` (or "latest") always means the current record.
    """

    async def get(
        self, kind: ResourceKind, resource_id: str, version: Optional[str] = None
    ) -> Optional[CatalogRecord]: ...

    async def write(self, kind: ResourceKind, record: CatalogRecord, *, override: bool = False) -> None: ...

    async def version(self, kind: ResourceKind, resource_id: str) -> None: ...

    async def remove(self, kind: ResourceKind, resource_id: str, version: Optional[str] = None) -> None: ...

    async def add_file(
        self,
        kind: ResourceKind,
        resource_id: str,
        file_name: str,
        content: str,
        version: Optional[str] = None,
    ) -> None: ...

    async def list_files(
        self, kind: ResourceKind, resource_id: str, version: Optional[str] = None
    ) -> List[str]: ...

    async def remove_file(
        self, kind: ResourceKind, resource_id: str, file_name: str, version: Optional[str] = None
    ) -> None: ...

    async def get_specification_files_for_service(
        self, service_id: str, version: Optional[str] = None
    ) -> List[SpecificationFile]: ...

    async def add_service_to_domain(self, domain_id: str, service: ResourceRef, version: Optional[str] = None) -> None: ...
