# eventcatalog_openapi/services/generator.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from eventcatalog_openapi.config import Settings, settings as default_settings
from eventcatalog_openapi.core.message_builder import build_message, is_schema_file_name, schema_files
from eventcatalog_openapi.core.operations import get_operations
from eventcatalog_openapi.core.reconciler import CatalogReconciler
from eventcatalog_openapi.core.service_builder import build_service
from eventcatalog_openapi.core.spec_loader import LoadedSpec, dump_parsed_spec, load_spec
from eventcatalog_openapi.dal.catalog_store import CatalogStore
from eventcatalog_openapi.dal.file_catalog import FileCatalog
from eventcatalog_openapi.dal.message_accessors import message_accessors
from eventcatalog_openapi.errors import ConfigurationError, SpecFetchError, SpecValidationError
from eventcatalog_openapi.models import (
    GeneratorOptions,
    MessageAction,
    MessageType,
    ReconcileOutcome,
    ResourceKind,
    ResourceRef,
    ServiceSpec,
)

logger = logging.getLogger("eventcatalog_openapi.services.generator")


@dataclass
class SpecReport:
    path: str
    service_id: Optional[str] = None
    version: Optional[str] = None
    outcome: Optional[ReconcileOutcome] = None
    messages: Dict[str, List[str]] = field(default_factory=dict)   # kind -> ids
    error: Optional[str] = None


@dataclass
class GeneratorReport:
    processed: List[SpecReport] = field(default_factory=list)
    skipped: List[SpecReport] = field(default_factory=list)


def parse_options(options: GeneratorOptions | Dict[str, Any]) -> GeneratorOptions:
    if isinstance(options, GeneratorOptions):
        return options
    try:
        return GeneratorOptions.model_validate(options)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid generator options: {e}") from e


def resolve_project_dir(cfg: Settings) -> str:
    project_dir = (cfg.project_dir or "").strip()
    if not project_dir:
        raise ConfigurationError("Please provide catalog url (env variable PROJECT_DIR)")
    if os.path.exists(project_dir) and not os.path.isdir(project_dir):
        raise ConfigurationError(f"PROJECT_DIR is not a directory: {project_dir}")
    return project_dir


def log_license_notice(license_key: Optional[str]) -> None:
    if license_key:
        logger.info("Using a commercial license key for this plugin")
        return
    logger.info("You are using the open source license for this plugin")
    logger.info(
        "This plugin is governed and published under a dual-license. "
        "If using for commercial or proprietary software, please contact hello@eventcatalog.dev "
        "for a license to support the project."
    )


class Generator:
    """
    Runs every configured spec through load → build → reconcile → attach,
    one at a time, in configuration order.
    """

    def __init__(
        self,
        options: GeneratorOptions | Dict[str, Any],
        *,
        settings: Optional[Settings] = None,
        store: Optional[CatalogStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.options = parse_options(options)
        self.settings = settings or default_settings
        self.project_dir = resolve_project_dir(self.settings)
        self.store: CatalogStore = store if store is not None else FileCatalog(self.project_dir)
        self.reconciler = CatalogReconciler(self.store)
        self.http_client = http_client

    async def run(self) -> GeneratorReport:
        log_license_notice(self.options.license_key)
        report = GeneratorReport()

        for service_spec in self.options.services:
            logger.info("Processing %s", service_spec.path)
            try:
                loaded = await load_spec(service_spec.path, client=self.http_client)
            except SpecValidationError as e:
                logger.error("Failed to parse OpenAPI file: %s", service_spec.path)
                logger.error("%s", e.reason)
                report.skipped.append(SpecReport(path=service_spec.path, error=e.reason))
                continue
            except SpecFetchError as e:
                logger.error("Failed to fetch OpenAPI file: %s", service_spec.path)
                logger.error("%s", e)
                report.skipped.append(SpecReport(path=service_spec.path, error=str(e)))
                continue

            logger.info("Loaded %s v%s", loaded.title, loaded.version)
            report.processed.append(await self._process_spec(service_spec, loaded))

        return report

    # ─────────────────────────────────────────────────────────────
    # Per spec
    # ─────────────────────────────────────────────────────────────
    async def _process_spec(self, service_spec: ServiceSpec, loaded: LoadedSpec) -> SpecReport:
        document = loaded.document
        service = build_service(service_spec, document)
        spec_report = SpecReport(path=service_spec.path, service_id=service.id, version=service.version)

        if self.options.domain:
            await self.reconciler.reconcile_domain(
                self.options.domain, ResourceRef(id=service.id, version=service.version)
            )

        sends, receives = await self._process_messages(document, spec_report)

        result = await self.reconciler.reconcile_service(service, sends=sends, receives=receives)
        spec_report.outcome = result.outcome

        fresh_content = (
            dump_parsed_spec(loaded.source, document)
            if self.options.save_parsed_spec_file
            else loaded.raw_text
        )
        spec_files: List[Tuple[str, str]] = [(f.file_name, f.content) for f in result.carried_spec_files]
        spec_files.append((service.schema_path or "openapi.yml", fresh_content))
        for file_name, content in spec_files:
            await self.store.add_file(ResourceKind.SERVICES, service.id, file_name, content, service.version)

        logger.info(" - Service (v%s) %s", service.version, result.outcome.value)
        return spec_report

    async def _process_messages(
        self, document: Dict[str, Any], spec_report: SpecReport
    ) -> Tuple[List[ResourceRef], List[ResourceRef]]:
        sends: List[ResourceRef] = []
        receives: List[ResourceRef] = []

        for operation in get_operations(document):
            message, schemas = build_message(document, operation)
            result = await self.reconciler.reconcile_message(message, operation.type)
            spec_report.messages.setdefault(result.kind.value, []).append(message.id)

            ref = ResourceRef(id=message.id, version=message.version)
            if operation.action == MessageAction.SENDS:
                sends.append(ref)
            else:
                receives.append(ref)

            await self._attach_schema_files(operation.type, message.id, message.version, schema_files(schemas))

            logger.info(" - Message (v%s) %s", message.version, result.outcome.value)
            if not operation.operation_id:
                logger.warning(
                    "  - OperationId not found for %s %s, creating one...", operation.method, operation.path
                )
                logger.warning("  - Use operationIds to give better unique names for EventCatalog")

        return sends, receives

    async def _attach_schema_files(
        self, message_type: MessageType, message_id: str, version: str, files: Dict[str, str]
    ) -> None:
        accessors = message_accessors(self.store, message_type)
        # schema files of status codes no longer in the operation go away on a same-version rewrite
        for file_name in await accessors.list_files(message_id, version):
            if is_schema_file_name(file_name) and file_name not in files:
                await accessors.remove_file(message_id, file_name, version)
        for file_name, content in files.items():
            await accessors.add_file(message_id, file_name, content, version)


async def run_generator(
    options: GeneratorOptions | Dict[str, Any],
    *,
    settings: Optional[Settings] = None,
    store: Optional[CatalogStore] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> GeneratorReport:
    return await Generator(options, settings=settings, store=store, http_client=http_client).run()
