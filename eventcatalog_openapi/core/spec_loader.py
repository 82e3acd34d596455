# eventcatalog_openapi/core/spec_loader.py
"""
Loading, validation and ``$ref`` resolution for OpenAPI documents.

Sources are either local paths or ``http(s)`` URLs. The raw text is read once
and kept on the returned :class:`LoadedSpec` so the file attached to the
service later is exactly what was validated.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx
import jsonref
import yaml
from openapi_spec_validator import validate

from eventcatalog_openapi.clients.http_utils import fetch_text, fetch_text_sync
from eventcatalog_openapi.errors import SpecValidationError

logger = logging.getLogger("eventcatalog_openapi.core.spec_loader")

DEFAULT_SPEC_FILE_NAME = "openapi.yml"


class _SpecLoader(yaml.SafeLoader):
    """SafeLoader that keeps timestamps as plain strings (schemas must stay JSON-serialisable)."""


_SpecLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class LoadedSpec:
    source: str
    raw_text: str
    document: Dict[str, Any]     # parsed, $refs resolved

    @property
    def version(self) -> str:
        return str(self.document.get("info", {}).get("version", ""))

    @property
    def title(self) -> str:
        return str(self.document.get("info", {}).get("title", ""))


def is_remote(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def spec_file_name(source: str) -> str:
    """Basename of the local path or of the URL path."""
    if is_remote(source):
        name = Path(urlparse(source).path).name
    else:
        name = Path(source).name
    return name or DEFAULT_SPEC_FILE_NAME


def _base_uri(source: str) -> str:
    if is_remote(source):
        return source
    return Path(source).resolve().as_uri()


def parse_text(text: str, source: str) -> Dict[str, Any]:
    # JSON is a subset of YAML, one loader covers both
    data = yaml.load(text, Loader=_SpecLoader)  # noqa: S506 - SafeLoader subclass
    if not isinstance(data, dict):
        raise SpecValidationError(source, "document root is not a mapping")
    return data


async def read_raw_spec(source: str, *, client: Optional[httpx.AsyncClient] = None) -> str:
    """Raw source text; remote sources are fetched once, any HTTP failure raises SpecFetchError."""
    if is_remote(source):
        return await fetch_text(source, client=client)
    return Path(source).read_text(encoding="utf-8")


def _load_ref_target(uri: str) -> Any:
    """jsonref loader for external documents (relative files or URLs)."""
    if is_remote(uri):
        text = fetch_text_sync(uri)
    else:
        parsed = urlparse(uri)
        text = Path(url2pathname(parsed.path)).read_text(encoding="utf-8")
    return yaml.load(text, Loader=_SpecLoader)  # noqa: S506


def validate_document(raw: Dict[str, Any], source: str) -> None:
    try:
        validate(raw, base_uri=_base_uri(source))
    except Exception as e:
        raise SpecValidationError(source, str(e).splitlines()[0] if str(e) else type(e).__name__) from e


def _materialise(node: Any, ancestors: Tuple[int, ...] = ()) -> Any:
    """
    Copy a proxied jsonref tree into plain dicts and lists.

    A reference back to a container already on the current path is kept as its
    literal ``{"$ref": ...}`` object, so recursive schemas stay finite.
    """
    reference = None
    while type(node) is jsonref.JsonRef:
        reference = reference or node.__reference__
        node = node.__subject__

    if reference is not None and id(node) in ancestors:
        return dict(reference)

    if isinstance(node, dict):
        inner = ancestors + (id(node),)
        return {k: _materialise(v, inner) for k, v in node.items()}
    if isinstance(node, list):
        inner = ancestors + (id(node),)
        return [_materialise(v, inner) for v in node]
    return node


def dereference(raw: Dict[str, Any], source: str) -> Dict[str, Any]:
    """
    Resolve internal and external $refs into a plain dict tree.

    Sibling keys of a $ref are dropped. Blocking: external refs are read with
    synchronous I/O.
    """
    proxied = jsonref.replace_refs(
        raw,
        base_uri=_base_uri(source),
        loader=_load_ref_target,
        jsonschema=False,
        merge_props=False,
        proxies=True,
        lazy_load=False,
    )
    return _materialise(proxied)


async def load_spec(source: str, *, client: Optional[httpx.AsyncClient] = None) -> LoadedSpec:
    """
    Read, validate and dereference a spec.

    Raises SpecValidationError for unparsable or invalid documents and
    SpecFetchError for remote sources that cannot be read. Either way the
    caller skips the spec.
    """
    try:
        raw_text = await read_raw_spec(source, client=client)
    except OSError as e:
        raise SpecValidationError(source, str(e)) from e

    try:
        raw = parse_text(raw_text, source)
    except yaml.YAMLError as e:
        raise SpecValidationError(source, str(e)) from e

    validate_document(raw, source)

    try:
        document = await asyncio.to_thread(dereference, raw, source)
    except jsonref.JsonRefError as e:
        raise SpecValidationError(source, f"unresolvable $ref: {e}") from e

    loaded = LoadedSpec(source=source, raw_text=raw_text, document=document)
    logger.debug("Loaded %s (%s v%s)", source, loaded.title, loaded.version)
    return loaded


def dump_parsed_spec(source: str, document: Dict[str, Any]) -> str:
    """Re-serialise a dereferenced document: JSON for .json sources, YAML otherwise."""
    if source.endswith(".json"):
        return json.dumps(document, indent=2)
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
