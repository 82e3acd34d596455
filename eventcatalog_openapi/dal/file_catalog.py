# eventcatalog_openapi/dal/file_catalog.py
"""
File-backed catalog.

Layout (per resource kind)::

    <root>/<kind>/<id>/index.md                        current record
    <root>/<kind>/<id>/versioned/<version>/index.md    archived records
    <root>/<kind>/<id>/<file>                          attachments (spec, schemas)

`index.md` is YAML front matter followed by the markdown body. Records that
were placed in another folder by hand are found by their front-matter id.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml

from eventcatalog_openapi.dal.catalog_store import is_latest
from eventcatalog_openapi.errors import CatalogWriteError
from eventcatalog_openapi.models import (
    RECORD_TYPES,
    CatalogRecord,
    Domain,
    ResourceKind,
    ResourceRef,
    SpecificationFile,
)

logger = logging.getLogger("eventcatalog_openapi.dal.file_catalog")

INDEX_FILE = "index.md"
VERSIONED_DIR = "versioned"
_FENCE = "---\n"


def _split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    if not text.startswith(_FENCE):
        return {}, text
    end = text.find("\n" + _FENCE, len(_FENCE) - 1)
    if end == -1:
        return {}, text
    head = text[len(_FENCE):end + 1]
    body = text[end + 1 + len(_FENCE):]
    data = yaml.safe_load(head) or {}
    return (data if isinstance(data, dict) else {}), body


def _render(record: CatalogRecord) -> str:
    head = yaml.safe_dump(record.front_matter(), sort_keys=False, allow_unicode=True)
    return f"{_FENCE}{head}{_FENCE}{record.markdown}"


class FileCatalog:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    # ─────────────────────────────────────────────────────────────
    # Lookup helpers
    # ─────────────────────────────────────────────────────────────
    def _kind_dir(self, kind: ResourceKind) -> Path:
        return self.root / kind.value

    def _read(self, kind: ResourceKind, index: Path) -> CatalogRecord:
        data, body = _split_front_matter(index.read_text(encoding="utf-8"))
        data["markdown"] = body
        return RECORD_TYPES[kind].model_validate(data)

    def _peek_id(self, index: Path) -> Optional[str]:
        try:
            data, _ = _split_front_matter(index.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError):
            return None
        value = data.get("id")
        return str(value) if value is not None else None

    def _iter_indexes(self, kind: ResourceKind, *, versioned: bool) -> Iterator[Path]:
        base = self._kind_dir(kind)
        if not base.is_dir():
            return
        for index in sorted(base.rglob(INDEX_FILE)):
            if (VERSIONED_DIR in index.relative_to(base).parts) == versioned:
                yield index

    def _find_current(self, kind: ResourceKind, resource_id: str) -> Optional[Path]:
        direct = self._kind_dir(kind) / resource_id / INDEX_FILE
        if direct.is_file() and self._peek_id(direct) == resource_id:
            return direct
        for index in self._iter_indexes(kind, versioned=False):
            if self._peek_id(index) == resource_id:
                return index
        return None

    def _find_versioned(self, kind: ResourceKind, resource_id: str, version: str) -> Optional[Path]:
        for index in self._iter_indexes(kind, versioned=True):
            if index.parent.name == version and self._peek_id(index) == resource_id:
                return index
        return None

    def _find(self, kind: ResourceKind, resource_id: str, version: Optional[str]) -> Optional[Path]:
        current = self._find_current(kind, resource_id)
        if is_latest(version):
            return current
        if current is not None and self._read(kind, current).version == version:
            return current
        return self._find_versioned(kind, resource_id, version)  # type: ignore[arg-type]

    # ─────────────────────────────────────────────────────────────
    # CatalogStore
    # ─────────────────────────────────────────────────────────────
    async def get(self, kind: ResourceKind, resource_id: str, version: Optional[str] = None) -> Optional[CatalogRecord]:
        index = self._find(kind, resource_id, version)
        return self._read(kind, index) if index else None

    async def write(self, kind: ResourceKind, record: CatalogRecord, *, override: bool = False) -> None:
        target_dir = self._kind_dir(kind) / record.id
        current = self._find_current(kind, record.id)
        if current is not None:
            existing = self._read(kind, current)
            if existing.version == record.version:
                if not override:
                    raise CatalogWriteError(
                        kind=kind.value, resource_id=record.id, version=record.version,
                        reason="already exists (use override)",
                    )
                await self.remove(kind, record.id, record.version)
                target_dir = current.parent
            elif current.parent == target_dir:
                raise CatalogWriteError(
                    kind=kind.value, resource_id=record.id, version=record.version,
                    reason=f"current record is v{existing.version}, version it first",
                )
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / INDEX_FILE).write_text(_render(record), encoding="utf-8")
        logger.debug("Wrote %s/%s (v%s) to %s", kind.value, record.id, record.version, target_dir)

    async def version(self, kind: ResourceKind, resource_id: str) -> None:
        """Archive every file of the current record under versioned/<its version>/."""
        current = self._find_current(kind, resource_id)
        if current is None:
            return
        record_dir = current.parent
        target = record_dir / VERSIONED_DIR / self._read(kind, current).version
        target.mkdir(parents=True, exist_ok=True)
        for entry in list(record_dir.iterdir()):
            if entry.name == VERSIONED_DIR:
                continue
            dest = target / entry.name
            if dest.is_dir():
                shutil.rmtree(dest)
            elif dest.exists():
                dest.unlink()
            shutil.move(str(entry), str(dest))
        logger.debug("Archived %s/%s into %s", kind.value, resource_id, target)

    async def remove(self, kind: ResourceKind, resource_id: str, version: Optional[str] = None) -> None:
        index = self._find(kind, resource_id, version)
        if index is not None:
            index.unlink()

    async def add_file(
        self,
        kind: ResourceKind,
        resource_id: str,
        file_name: str,
        content: str,
        version: Optional[str] = None,
    ) -> None:
        index = self._find(kind, resource_id, version)
        if index is None:
            raise CatalogWriteError(
                kind=kind.value, resource_id=resource_id, version=version or "latest",
                reason=f"no record to attach '{file_name}' to",
            )
        (index.parent / file_name).write_text(content, encoding="utf-8")

    async def list_files(
        self, kind: ResourceKind, resource_id: str, version: Optional[str] = None
    ) -> List[str]:
        """Names of the files attached next to a record (index.md excluded)."""
        index = self._find(kind, resource_id, version)
        if index is None:
            return []
        return sorted(p.name for p in index.parent.iterdir() if p.is_file() and p != index)

    async def remove_file(
        self, kind: ResourceKind, resource_id: str, file_name: str, version: Optional[str] = None
    ) -> None:
        index = self._find(kind, resource_id, version)
        if index is None:
            return
        path = index.parent / file_name
        if path.is_file():
            path.unlink()
            logger.debug("Removed %s from %s/%s", file_name, kind.value, resource_id)

    async def get_specification_files_for_service(
        self, service_id: str, version: Optional[str] = None
    ) -> List[SpecificationFile]:
        index = self._find(ResourceKind.SERVICES, service_id, version)
        if index is None:
            return []
        service = self._read(ResourceKind.SERVICES, index)
        files: List[SpecificationFile] = []
        for key, file_name in (getattr(service, "specifications", None) or {}).items():
            path = index.parent / file_name
            if path.is_file():
                files.append(
                    SpecificationFile(
                        key=key,
                        file_name=file_name,
                        content=path.read_text(encoding="utf-8"),
                        path=str(path),
                    )
                )
        return files

    async def add_service_to_domain(self, domain_id: str, service: ResourceRef, version: Optional[str] = None) -> None:
        index = self._find(ResourceKind.DOMAINS, domain_id, version)
        domain = self._read(ResourceKind.DOMAINS, index) if index else None
        if index is None or not isinstance(domain, Domain):
            raise CatalogWriteError(
                kind=ResourceKind.DOMAINS.value, resource_id=domain_id, version=version or "latest",
                reason="domain not found",
            )
        if any(s.id == service.id and s.version == service.version for s in domain.services):
            return
        domain.services.append(service)
        # rewritten where it lives (current or archived)
        index.write_text(_render(domain), encoding="utf-8")
