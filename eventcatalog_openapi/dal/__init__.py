from .catalog_store import CatalogStore, LATEST, is_latest
from .file_catalog import FileCatalog
from .message_accessors import MESSAGE_KINDS, MessageAccessors, message_accessors
