# eventcatalog_openapi/dal/message_accessors.py
from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, Dict, List, Optional

from eventcatalog_openapi.dal.catalog_store import CatalogStore
from eventcatalog_openapi.models import CatalogRecord, MessageType, ResourceKind

MESSAGE_KINDS: Dict[MessageType, ResourceKind] = {
    MessageType.EVENT: ResourceKind.EVENTS,
    MessageType.COMMAND: ResourceKind.COMMANDS,
    MessageType.QUERY: ResourceKind.QUERIES,
}


@dataclass(frozen=True)
class MessageAccessors:
    """Catalog functions bound to one message collection."""
    kind: ResourceKind
    get: Callable[..., Awaitable[Optional[CatalogRecord]]]
    write: Callable[..., Awaitable[None]]
    version: Callable[..., Awaitable[None]]
    add_file: Callable[..., Awaitable[None]]
    list_files: Callable[..., Awaitable[List[str]]]
    remove_file: Callable[..., Awaitable[None]]


def message_accessors(store: CatalogStore, message_type: MessageType) -> MessageAccessors:
    kind = MESSAGE_KINDS[message_type]
    return MessageAccessors(
        kind=kind,
        get=partial(store.get, kind),
        write=partial(store.write, kind),
        version=partial(store.version, kind),
        add_file=partial(store.add_file, kind),
        list_files=partial(store.list_files, kind),
        remove_file=partial(store.remove_file, kind),
    )
