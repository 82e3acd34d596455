# eventcatalog_openapi/errors.py
from __future__ import annotations

from typing import Optional


class GeneratorError(RuntimeError):
    """Base class for every error raised by the generator."""


class ConfigurationError(GeneratorError):
    """Options or settings are unusable; the run aborts before any spec is processed."""


class SpecValidationError(GeneratorError):
    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Failed to parse OpenAPI file: {source} :: {reason}")
        self.source = source
        self.reason = reason


class SpecFetchError(GeneratorError):
    def __init__(self, *, url: str, status: Optional[int], body: str = "") -> None:
        super().__init__(f"Failed to fetch file: {url}, status: {status}")
        self.url = url
        self.status = status
        self.body = body


class CatalogWriteError(GeneratorError):
    def __init__(self, *, kind: str, resource_id: str, version: str, reason: str) -> None:
        super().__init__(f"Cannot write {kind} '{resource_id}' (v{version}): {reason}")
        self.kind = kind
        self.resource_id = resource_id
        self.version = version
