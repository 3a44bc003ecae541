"""rest-plan: declarative REST interfaces compiled into request plans."""

from .client import RestClient, create_jsonplaceholder_client
from .config import (
    HTTP_ERROR_THRESHOLD,
    HTTP_TIMEOUT_SECONDS,
    JSONPLACEHOLDER_BASE_URL,
    USER_AGENT,
)
from .declarations import (
    Body,
    BodySerializationMethod,
    HeaderParam,
    HttpMethod,
    PathParam,
    QueryParam,
    delete,
    get,
    head,
    header,
    options,
    patch,
    post,
    put,
    request,
    trace,
)
from .descriptors import (
    InterfaceDescriptor,
    MethodDescriptor,
    ReturnKind,
    compile_interface,
)
from .errors import (
    ApiError,
    ContractViolation,
    DeclarationError,
    ImplementationCreationError,
    RequestCancelledError,
    RestPlanError,
)
from .factory import (
    CompiledImplementation,
    ImplementationFactory,
    create_implementation,
    default_factory,
)
from .http_requester import HttpxRequester
from .models import BodyParameterInfo, CancellationToken, RequestInfo, Response
from .parameters import IndexedParameter, ParameterGrouping
from .requester import Requester

__all__ = [
    # Client
    "RestClient",
    "create_jsonplaceholder_client",
    # Declarations
    "HttpMethod",
    "BodySerializationMethod",
    "request",
    "get",
    "post",
    "put",
    "delete",
    "patch",
    "head",
    "options",
    "trace",
    "header",
    "PathParam",
    "QueryParam",
    "HeaderParam",
    "Body",
    # Compiler
    "compile_interface",
    "InterfaceDescriptor",
    "MethodDescriptor",
    "ReturnKind",
    "ParameterGrouping",
    "IndexedParameter",
    # Factory
    "ImplementationFactory",
    "CompiledImplementation",
    "create_implementation",
    "default_factory",
    # Backends
    "Requester",
    "HttpxRequester",
    # Models
    "RequestInfo",
    "BodyParameterInfo",
    "CancellationToken",
    "Response",
    # Errors
    "RestPlanError",
    "DeclarationError",
    "ImplementationCreationError",
    "ContractViolation",
    "ApiError",
    "RequestCancelledError",
    # Config
    "HTTP_ERROR_THRESHOLD",
    "HTTP_TIMEOUT_SECONDS",
    "JSONPLACEHOLDER_BASE_URL",
    "USER_AGENT",
]
