# eventcatalog_openapi/core/reconciler.py
"""
Create / version / update decisions for domains, services and messages.

Every decision re-reads the catalog through the injected store; nothing is
cached between calls. Markdown, owners, repository, `sends` and extra
specifications of an existing record are carried onto the record written in
its place.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from eventcatalog_openapi.core.domain_builder import build_domain
from eventcatalog_openapi.core.service_builder import OPENAPI_SPECIFICATION_KEY
from eventcatalog_openapi.core.versions import is_newer
from eventcatalog_openapi.dal.catalog_store import LATEST, CatalogStore
from eventcatalog_openapi.dal.message_accessors import message_accessors
from eventcatalog_openapi.models import (
    CatalogRecord,
    DomainSpec,
    Message,
    MessageType,
    ReconcileOutcome,
    ResourceKind,
    ResourceRef,
    Service,
    SpecificationFile,
    dedupe_refs,
)

logger = logging.getLogger("eventcatalog_openapi.core.reconciler")


@dataclass
class ServiceReconciliation:
    service: Service
    outcome: ReconcileOutcome
    previous_version: Optional[str] = None
    carried_spec_files: List[SpecificationFile] = field(default_factory=list)


@dataclass
class MessageReconciliation:
    message: Message
    kind: ResourceKind
    outcome: ReconcileOutcome
    previous_version: Optional[str] = None


def _preserved_markdown(existing: CatalogRecord, fresh: CatalogRecord) -> str:
    return existing.markdown if existing.markdown.strip() else fresh.markdown


def _extra_fields(existing: CatalogRecord) -> Dict[str, Any]:
    return dict(existing.model_extra or {})


def _warn_if_older(kind: str, resource_id: str, new_version: str, cataloged_version: str) -> None:
    if is_newer(new_version, cataloged_version) is False:
        logger.warning(
            " - Older version detected for %s '%s': v%s is not newer than cataloged v%s",
            kind, resource_id, new_version, cataloged_version,
        )


class CatalogReconciler:
    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    # ─────────────────────────────────────────────────────────────
    # Domain
    # ─────────────────────────────────────────────────────────────
    async def reconcile_domain(self, domain_spec: DomainSpec, service: ResourceRef) -> ReconcileOutcome:
        at_version = await self.store.get(ResourceKind.DOMAINS, domain_spec.id, domain_spec.version)
        current = await self.store.get(ResourceKind.DOMAINS, domain_spec.id, LATEST)
        logger.info("Processing domain: %s (v%s)", domain_spec.name, domain_spec.version)

        outcome = ReconcileOutcome.UPDATED
        if current is not None and current.version != domain_spec.version:
            _warn_if_older("domain", domain_spec.id, domain_spec.version, current.version)
            await self.store.version(ResourceKind.DOMAINS, domain_spec.id)
            logger.info(" - Versioned previous domain (v%s)", current.version)
            outcome = ReconcileOutcome.VERSIONED

        if at_version is None:
            await self.store.write(ResourceKind.DOMAINS, build_domain(domain_spec), override=True)
            logger.info(" - Domain (v%s) created", domain_spec.version)
            if current is None:
                outcome = ReconcileOutcome.CREATED
        else:
            logger.info(" - Domain (v%s) already exists, skipped creation...", domain_spec.version)

        await self.store.add_service_to_domain(domain_spec.id, service, domain_spec.version)
        return outcome

    # ─────────────────────────────────────────────────────────────
    # Service
    # ─────────────────────────────────────────────────────────────
    async def reconcile_service(
        self,
        service: Service,
        *,
        sends: List[ResourceRef],
        receives: List[ResourceRef],
    ) -> ServiceReconciliation:
        latest = await self.store.get(ResourceKind.SERVICES, service.id, LATEST)
        logger.info("Processing service: %s (v%s)", service.name, service.version)

        if not isinstance(latest, Service):
            merged = service.model_copy(update={"sends": dedupe_refs(sends), "receives": dedupe_refs(receives)})
            await self.store.write(ResourceKind.SERVICES, merged, override=True)
            return ServiceReconciliation(service=merged, outcome=ReconcileOutcome.CREATED)

        # captured before any archive move
        carried = [
            f for f in await self.store.get_specification_files_for_service(service.id, LATEST)
            if f.key != OPENAPI_SPECIFICATION_KEY
        ]

        update: Dict[str, Any] = {
            **_extra_fields(latest),
            "markdown": _preserved_markdown(latest, service),
            "specifications": {**latest.specifications, **service.specifications},
            "sends": dedupe_refs(latest.sends, sends),
        }
        if latest.owners:
            update["owners"] = latest.owners
        if latest.repository:
            update["repository"] = latest.repository

        if latest.version != service.version:
            _warn_if_older("service", service.id, service.version, latest.version)
            await self.store.version(ResourceKind.SERVICES, service.id)
            logger.info(" - Versioned previous service (v%s)", latest.version)
            update["receives"] = dedupe_refs(receives)
            outcome = ReconcileOutcome.VERSIONED
        else:
            update["receives"] = dedupe_refs(latest.receives, receives)
            outcome = ReconcileOutcome.UPDATED

        merged = Service.model_validate({**service.model_dump(), **update})
        await self.store.write(ResourceKind.SERVICES, merged, override=True)
        return ServiceReconciliation(
            service=merged,
            outcome=outcome,
            previous_version=latest.version,
            carried_spec_files=carried,
        )

    # ─────────────────────────────────────────────────────────────
    # Messages
    # ─────────────────────────────────────────────────────────────
    async def reconcile_message(self, message: Message, message_type: MessageType) -> MessageReconciliation:
        accessors = message_accessors(self.store, message_type)
        latest = await accessors.get(message.id, LATEST)
        logger.info("Processing message: %s (v%s)", message.name, message.version)

        if latest is None:
            await accessors.write(message, override=True)
            return MessageReconciliation(message=message, kind=accessors.kind, outcome=ReconcileOutcome.CREATED)

        merged = message.model_copy(update={"markdown": _preserved_markdown(latest, message)})
        if latest.version != message.version:
            _warn_if_older(message_type.value, message.id, message.version, latest.version)
            await accessors.version(message.id)
            logger.info(" - Versioned previous message: (v%s)", latest.version)
            outcome = ReconcileOutcome.VERSIONED
        else:
            outcome = ReconcileOutcome.UPDATED

        await accessors.write(merged, override=True)
        return MessageReconciliation(
            message=merged,
            kind=accessors.kind,
            outcome=outcome,
            previous_version=latest.version,
        )
