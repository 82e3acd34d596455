"""Shared fixtures: catalog roots, settings and an in-memory CatalogStore."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from eventcatalog_openapi.config import Settings
from eventcatalog_openapi.core.spec_loader import load_spec
from eventcatalog_openapi.dal.catalog_store import is_latest
from eventcatalog_openapi.dal.file_catalog import FileCatalog
from eventcatalog_openapi.models import (
    CatalogRecord,
    Domain,
    ResourceKind,
    ResourceRef,
    SpecificationFile,
)

OPENAPI_FILES = Path(__file__).parent / "openapi_files"


class InMemoryCatalog:
    """CatalogStore fake: one current record per id plus archived copies, files keyed by id+version."""

    def __init__(self) -> None:
        self.current: Dict[Tuple[ResourceKind, str], CatalogRecord] = {}
        self.archived: Dict[Tuple[ResourceKind, str, str], CatalogRecord] = {}
        self.files: Dict[Tuple[ResourceKind, str, str], Dict[str, str]] = {}
        self.calls: List[Tuple[str, ResourceKind, str]] = []

    def _lookup(self, kind: ResourceKind, resource_id: str, version: Optional[str]) -> Optional[CatalogRecord]:
        current = self.current.get((kind, resource_id))
        if is_latest(version):
            return current
        if current is not None and current.version == version:
            return current
        return self.archived.get((kind, resource_id, version))

    async def get(self, kind, resource_id, version=None):
        record = self._lookup(kind, resource_id, version)
        return record.model_copy(deep=True) if record else None

    async def write(self, kind, record, *, override=False):
        self.calls.append(("write", kind, record.id))
        existing = self.current.get((kind, record.id))
        if existing is not None and existing.version == record.version and not override:
            raise AssertionError("write without override over an existing record")
        self.current[(kind, record.id)] = record.model_copy(deep=True)

    async def version(self, kind, resource_id):
        self.calls.append(("version", kind, resource_id))
        record = self.current.pop((kind, resource_id), None)
        if record is not None:
            self.archived[(kind, resource_id, record.version)] = record

    async def remove(self, kind, resource_id, version=None):
        record = self._lookup(kind, resource_id, version)
        if record is None:
            return
        if self.current.get((kind, resource_id)) is record:
            del self.current[(kind, resource_id)]
        else:
            del self.archived[(kind, resource_id, record.version)]

    async def add_file(self, kind, resource_id, file_name, content, version=None):
        record = self._lookup(kind, resource_id, version)
        assert record is not None, f"no {kind.value}/{resource_id} to attach {file_name} to"
        self.files.setdefault((kind, resource_id, record.version), {})[file_name] = content

    async def list_files(self, kind, resource_id, version=None):
        record = self._lookup(kind, resource_id, version)
        if record is None:
            return []
        return sorted(self.files.get((kind, resource_id, record.version), {}))

    async def remove_file(self, kind, resource_id, file_name, version=None):
        self.calls.append(("remove_file", kind, resource_id, file_name))
        record = self._lookup(kind, resource_id, version)
        if record is not None:
            self.files.get((kind, resource_id, record.version), {}).pop(file_name, None)

    async def get_specification_files_for_service(self, service_id, version=None):
        record = self._lookup(ResourceKind.SERVICES, service_id, version)
        if record is None:
            return []
        stored = self.files.get((ResourceKind.SERVICES, service_id, record.version), {})
        return [
            SpecificationFile(key=key, file_name=name, content=stored[name])
            for key, name in record.specifications.items()
            if name in stored
        ]

    async def add_service_to_domain(self, domain_id: str, service: ResourceRef, version=None):
        domain = self._lookup(ResourceKind.DOMAINS, domain_id, version)
        assert isinstance(domain, Domain)
        if not any(s.id == service.id and s.version == service.version for s in domain.services):
            domain.services.append(service)


@pytest.fixture()
def openapi_files() -> Path:
    return OPENAPI_FILES


@pytest.fixture()
def catalog_dir(tmp_path: Path) -> Path:
    root = tmp_path / "catalog"
    root.mkdir()
    return root


@pytest.fixture()
def settings(catalog_dir: Path) -> Settings:
    return Settings(project_dir=str(catalog_dir))


@pytest.fixture()
def file_catalog(catalog_dir: Path) -> FileCatalog:
    return FileCatalog(catalog_dir)


@pytest.fixture()
def memory_catalog() -> InMemoryCatalog:
    return InMemoryCatalog()


def load_document(name: str) -> Dict[str, Any]:
    """Dereferenced document of one of the bundled OpenAPI files."""
    return asyncio.run(load_spec(str(OPENAPI_FILES / name))).document


@pytest.fixture()
def petstore() -> Dict[str, Any]:
    return load_document("petstore.yml")
