"""Create / version / update decisions, exercised against the in-memory store."""

from __future__ import annotations

import logging

import pytest

from eventcatalog_openapi.core.reconciler import CatalogReconciler
from eventcatalog_openapi.core.versions import is_newer
from eventcatalog_openapi.dal.message_accessors import message_accessors
from eventcatalog_openapi.models import (
    Domain,
    DomainSpec,
    Message,
    MessageType,
    ReconcileOutcome,
    ResourceKind,
    ResourceRef,
    Service,
)


def _service(version: str = "1.0.0", **kwargs) -> Service:
    fields = {
        "id": "orders-api",
        "name": "Orders API",
        "version": version,
        "markdown": "generated\n",
        "schema_path": "openapi.yml",
        "specifications": {"openapiPath": "openapi.yml"},
        **kwargs,
    }
    return Service(**fields)


def _message(version: str = "1.0.0", markdown: str = "generated\n") -> Message:
    return Message(id="orderPlaced", name="orderPlaced", version=version, markdown=markdown)


def _refs(*ids: str, version: str = "1.0.0"):
    return [ResourceRef(id=i, version=version) for i in ids]


# ─────────────────────────────────────────────────────────────
# Messages
# ─────────────────────────────────────────────────────────────
@pytest.mark.asyncio()
async def test_new_message_is_created_in_its_kind(memory_catalog) -> None:
    result = await CatalogReconciler(memory_catalog).reconcile_message(_message(), MessageType.EVENT)

    assert result.outcome == ReconcileOutcome.CREATED
    assert result.kind == ResourceKind.EVENTS
    assert (ResourceKind.EVENTS, "orderPlaced") in memory_catalog.current


@pytest.mark.asyncio()
async def test_same_version_message_keeps_existing_markdown(memory_catalog) -> None:
    reconciler = CatalogReconciler(memory_catalog)
    await reconciler.reconcile_message(_message(markdown="hand written\n"), MessageType.QUERY)

    result = await reconciler.reconcile_message(_message(), MessageType.QUERY)

    assert result.outcome == ReconcileOutcome.UPDATED
    assert memory_catalog.current[(ResourceKind.QUERIES, "orderPlaced")].markdown == "hand written\n"
    assert not memory_catalog.archived


@pytest.mark.asyncio()
async def test_blank_existing_markdown_is_replaced(memory_catalog) -> None:
    reconciler = CatalogReconciler(memory_catalog)
    await reconciler.reconcile_message(_message(markdown="  \n"), MessageType.QUERY)

    await reconciler.reconcile_message(_message(), MessageType.QUERY)

    assert memory_catalog.current[(ResourceKind.QUERIES, "orderPlaced")].markdown == "generated\n"


@pytest.mark.asyncio()
async def test_new_message_version_archives_previous(memory_catalog) -> None:
    reconciler = CatalogReconciler(memory_catalog)
    await reconciler.reconcile_message(_message("1.0.0", markdown="hand written\n"), MessageType.COMMAND)

    result = await reconciler.reconcile_message(_message("2.0.0"), MessageType.COMMAND)

    assert result.outcome == ReconcileOutcome.VERSIONED
    assert result.previous_version == "1.0.0"
    assert memory_catalog.current[(ResourceKind.COMMANDS, "orderPlaced")].version == "2.0.0"
    assert memory_catalog.current[(ResourceKind.COMMANDS, "orderPlaced")].markdown == "hand written\n"
    assert (ResourceKind.COMMANDS, "orderPlaced", "1.0.0") in memory_catalog.archived


@pytest.mark.asyncio()
async def test_older_message_version_warns_but_proceeds(memory_catalog, caplog: pytest.LogCaptureFixture) -> None:
    reconciler = CatalogReconciler(memory_catalog)
    await reconciler.reconcile_message(_message("2.0.0"), MessageType.EVENT)

    with caplog.at_level(logging.WARNING, logger="eventcatalog_openapi"):
        result = await reconciler.reconcile_message(_message("1.0.0"), MessageType.EVENT)

    assert result.outcome == ReconcileOutcome.VERSIONED
    assert "Older version detected" in caplog.text
    assert memory_catalog.current[(ResourceKind.EVENTS, "orderPlaced")].version == "1.0.0"


@pytest.mark.asyncio()
async def test_message_accessors_are_bound_to_the_kind(memory_catalog) -> None:
    accessors = message_accessors(memory_catalog, MessageType.COMMAND)
    await accessors.write(_message())
    await accessors.add_file("orderPlaced", "response-200.json", "{}")
    await accessors.add_file("orderPlaced", "response-404.json", "{}")

    await accessors.remove_file("orderPlaced", "response-404.json")

    assert accessors.kind == ResourceKind.COMMANDS
    assert await accessors.list_files("orderPlaced") == ["response-200.json"]
    assert ("remove_file", ResourceKind.COMMANDS, "orderPlaced", "response-404.json") in memory_catalog.calls


# ─────────────────────────────────────────────────────────────
# Services
# ─────────────────────────────────────────────────────────────
@pytest.mark.asyncio()
async def test_new_service_gets_deduplicated_lists(memory_catalog) -> None:
    result = await CatalogReconciler(memory_catalog).reconcile_service(
        _service(), sends=_refs("a", "a"), receives=_refs("b", "c", "b")
    )

    assert result.outcome == ReconcileOutcome.CREATED
    assert [r.id for r in result.service.sends] == ["a"]
    assert [r.id for r in result.service.receives] == ["b", "c"]
    assert result.carried_spec_files == []


@pytest.mark.asyncio()
async def test_same_version_service_merges_lists_and_keeps_metadata(memory_catalog) -> None:
    existing = _service(
        markdown="hand written\n",
        sends=_refs("orderShipped"),
        receives=_refs("listOrders"),
        owners=["team-orders"],
        repository={"url": "https://github.com/acme/orders"},
        specifications={"openapiPath": "openapi.yml", "asyncapiPath": "asyncapi.yml"},
        styleGuide="strict",
    )
    memory_catalog.current[(ResourceKind.SERVICES, "orders-api")] = existing
    memory_catalog.files[(ResourceKind.SERVICES, "orders-api", "1.0.0")] = {
        "openapi.yml": "old openapi",
        "asyncapi.yml": "asyncapi: 3.0.0",
    }

    result = await CatalogReconciler(memory_catalog).reconcile_service(
        _service(), sends=_refs("orderPlaced"), receives=_refs("listOrders", "getOrder")
    )

    merged = result.service
    assert result.outcome == ReconcileOutcome.UPDATED
    assert merged.markdown == "hand written\n"
    assert [r.id for r in merged.sends] == ["orderShipped", "orderPlaced"]
    assert [r.id for r in merged.receives] == ["listOrders", "getOrder"]
    assert merged.owners == ["team-orders"]
    assert merged.repository == {"url": "https://github.com/acme/orders"}
    assert merged.specifications == {"openapiPath": "openapi.yml", "asyncapiPath": "asyncapi.yml"}
    assert merged.model_extra == {"styleGuide": "strict"}
    assert [f.file_name for f in result.carried_spec_files] == ["asyncapi.yml"]


@pytest.mark.asyncio()
async def test_new_service_version_replaces_receives_and_archives(memory_catalog) -> None:
    memory_catalog.current[(ResourceKind.SERVICES, "orders-api")] = _service(
        "0.1.0", sends=_refs("orderShipped", version="0.1.0"), receives=_refs("legacyQuery", version="0.1.0")
    )

    result = await CatalogReconciler(memory_catalog).reconcile_service(
        _service("1.0.0"), sends=[], receives=_refs("listOrders")
    )

    assert result.outcome == ReconcileOutcome.VERSIONED
    assert result.previous_version == "0.1.0"
    assert [r.id for r in result.service.receives] == ["listOrders"]
    assert [r.id for r in result.service.sends] == ["orderShipped"]
    assert (ResourceKind.SERVICES, "orders-api", "0.1.0") in memory_catalog.archived
    assert memory_catalog.current[(ResourceKind.SERVICES, "orders-api")].version == "1.0.0"


@pytest.mark.asyncio()
async def test_carried_spec_files_are_read_before_archiving(memory_catalog) -> None:
    memory_catalog.current[(ResourceKind.SERVICES, "orders-api")] = _service(
        "0.1.0", specifications={"openapiPath": "openapi.yml", "asyncapiPath": "asyncapi.yml"}
    )
    memory_catalog.files[(ResourceKind.SERVICES, "orders-api", "0.1.0")] = {"asyncapi.yml": "asyncapi: 3.0.0"}

    result = await CatalogReconciler(memory_catalog).reconcile_service(_service("1.0.0"), sends=[], receives=[])

    assert [(f.key, f.content) for f in result.carried_spec_files] == [("asyncapiPath", "asyncapi: 3.0.0")]
    assert result.service.specifications["asyncapiPath"] == "asyncapi.yml"


# ─────────────────────────────────────────────────────────────
# Domains
# ─────────────────────────────────────────────────────────────
@pytest.mark.asyncio()
async def test_domain_is_created_and_lists_the_service(memory_catalog) -> None:
    spec = DomainSpec(id="orders", name="Orders", version="1.0.0")

    outcome = await CatalogReconciler(memory_catalog).reconcile_domain(spec, ResourceRef(id="orders-api", version="1.0.0"))

    domain = memory_catalog.current[(ResourceKind.DOMAINS, "orders")]
    assert outcome == ReconcileOutcome.CREATED
    assert isinstance(domain, Domain)
    assert [(s.id, s.version) for s in domain.services] == [("orders-api", "1.0.0")]


@pytest.mark.asyncio()
async def test_existing_domain_version_is_not_rewritten(memory_catalog) -> None:
    memory_catalog.current[(ResourceKind.DOMAINS, "orders")] = Domain(
        id="orders", name="Orders", version="1.0.0", markdown="hand written\n"
    )
    spec = DomainSpec(id="orders", name="Orders", version="1.0.0")
    reconciler = CatalogReconciler(memory_catalog)

    await reconciler.reconcile_domain(spec, ResourceRef(id="orders-api", version="1.0.0"))
    await reconciler.reconcile_domain(spec, ResourceRef(id="orders-api", version="1.0.0"))

    domain = memory_catalog.current[(ResourceKind.DOMAINS, "orders")]
    assert domain.markdown == "hand written\n"
    assert len(domain.services) == 1
    assert ("write", ResourceKind.DOMAINS, "orders") not in memory_catalog.calls


@pytest.mark.asyncio()
async def test_new_domain_version_archives_previous(memory_catalog) -> None:
    memory_catalog.current[(ResourceKind.DOMAINS, "orders")] = Domain(id="orders", name="Orders", version="0.0.1")

    outcome = await CatalogReconciler(memory_catalog).reconcile_domain(
        DomainSpec(id="orders", name="Orders", version="1.0.0"), ResourceRef(id="orders-api", version="1.0.0")
    )

    assert outcome == ReconcileOutcome.VERSIONED
    assert (ResourceKind.DOMAINS, "orders", "0.0.1") in memory_catalog.archived
    assert memory_catalog.current[(ResourceKind.DOMAINS, "orders")].version == "1.0.0"


@pytest.mark.parametrize(
    ("candidate", "current", "expected"),
    [
        ("1.0.0", "0.1.0", True),
        ("1.0.0", "1.0.0", False),
        ("0.9.0", "1.0.0", False),
        ("1.10.0", "1.9.0", True),
        ("latest-draft", "1.0.0", None),
    ],
)
def test_is_newer(candidate: str, current: str, expected) -> None:
    assert is_newer(candidate, current) is expected
