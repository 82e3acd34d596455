# eventcatalog_openapi/models/options.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceSpec(BaseModel):
    """One OpenAPI document to turn into a catalog service."""
    id: Optional[str] = None
    path: str

    @field_validator("path")
    @classmethod
    def _path_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("service path must not be empty")
        return v.strip()


class DomainSpec(BaseModel):
    id: str
    name: str
    version: str


class GeneratorOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    services: List[ServiceSpec] = Field(..., min_length=1)
    domain: Optional[DomainSpec] = None
    debug: bool = False
    # store the dereferenced document instead of the raw source text
    save_parsed_spec_file: bool = Field(default=False, alias="saveParsedSpecFile")
    license_key: Optional[str] = Field(default=None, alias="licenseKey")
