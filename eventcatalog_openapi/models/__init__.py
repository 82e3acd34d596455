from .catalog_models import (
    ResourceKind,
    ReconcileOutcome,
    Badge,
    ResourceRef,
    CatalogRecord,
    Domain,
    Service,
    Message,
    SpecificationFile,
    RECORD_TYPES,
    dedupe_refs,
)

from .openapi_models import (
    MessageType,
    MessageAction,
    DEFAULT_MESSAGE_TYPE,
    ExternalDocs,
    Operation,
    OperationParameter,
    ResponseSchema,
    RequestBodiesAndResponses,
)

from .options import (
    ServiceSpec,
    DomainSpec,
    GeneratorOptions,
)
