"""
Request descriptor compiler.

Turns an interface class into an InterfaceDescriptor: one immutable
MethodDescriptor per request method, holding everything the generated
method needs to build a RequestInfo and pick a backend entry point.

Compilation flow for each method:
    request declaration -> parameter classification -> path validation
      -> return shape -> MethodDescriptor
"""

from __future__ import annotations

import abc
import collections.abc
import inspect
import logging
import typing
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, get_args, get_origin

import httpx

from .declarations import HttpMethod, class_headers, method_headers, request_declarations
from .errors import DeclarationError
from .models import Response
from .parameters import ParameterGrouping, classify_parameters
from .paths import validate_path_params

logger = logging.getLogger(__name__)

_EXCLUDED_BASES = (object, Protocol, Generic)
_AWAITABLE_ORIGINS = (collections.abc.Awaitable, collections.abc.Coroutine)


class ReturnKind(str, Enum):
    """Which backend entry point a method dispatches to."""

    VOID = "void"
    TYPED = "typed"
    RAW_RESPONSE = "raw_response"
    ENVELOPE = "envelope"


@dataclass(frozen=True)
class MethodDescriptor:
    """Compiled request plan for one interface method."""

    name: str
    http_method: HttpMethod
    path: str
    class_headers: tuple[tuple[str, str], ...]
    method_headers: tuple[tuple[str, str], ...]
    parameters: ParameterGrouping
    return_kind: ReturnKind
    result_type: Any
    signature: inspect.Signature


@dataclass(frozen=True)
class InterfaceDescriptor:
    """Compiled request plans for every method of one interface."""

    interface_type: type
    class_headers: tuple[tuple[str, str], ...]
    methods: tuple[MethodDescriptor, ...]

    def method(self, name: str) -> MethodDescriptor:
        for descriptor in self.methods:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    def __iter__(self) -> Iterator[MethodDescriptor]:
        return iter(self.methods)

    def __len__(self) -> int:
        return len(self.methods)


# -----------------------------------------------------------------------------
# Return Shape
# -----------------------------------------------------------------------------


def _declared_result(func: Callable[..., Any], hints: dict[str, Any], method_name: str) -> Any:
    """The type a call eventually produces, once awaited."""
    if "return" not in hints:
        raise DeclarationError(
            f"Method {method_name} has no return annotation",
            method_name=method_name,
        )
    annotation = hints["return"]

    if inspect.iscoroutinefunction(func):
        return annotation

    origin = get_origin(annotation) or annotation
    if origin in _AWAITABLE_ORIGINS:
        args = get_args(annotation)
        return args[-1] if args else None

    raise DeclarationError(
        f"Method {method_name} must be declared async or return an Awaitable",
        method_name=method_name,
    )


def classify_return(
    func: Callable[..., Any], hints: dict[str, Any], method_name: str
) -> tuple[ReturnKind, Any]:
    """
    Determine the backend entry point for a method from its declared result.

    - None                -> VOID
    - httpx.Response      -> RAW_RESPONSE
    - Response[T]         -> ENVELOPE, with T
    - any other T         -> TYPED, with T
    """
    result = _declared_result(func, hints, method_name)

    if result is None or result is type(None):
        return ReturnKind.VOID, None
    is_plain_class = get_origin(result) is None and inspect.isclass(result)
    if is_plain_class and issubclass(result, httpx.Response):
        return ReturnKind.RAW_RESPONSE, result
    if result is Response or get_origin(result) is Response:
        args = get_args(result)
        return ReturnKind.ENVELOPE, args[0] if args else Any
    return ReturnKind.TYPED, result


# -----------------------------------------------------------------------------
# Interface Compilation
# -----------------------------------------------------------------------------


def request_methods(interface_type: type) -> dict[str, Callable[..., Any]]:
    """
    Public functions declared on `interface_type` and its bases.

    Bases are walked from the most generic down, so overrides win and the
    result follows declaration order.
    """
    methods: dict[str, Callable[..., Any]] = {}
    for cls in reversed(interface_type.__mro__):
        if cls in _EXCLUDED_BASES:
            continue
        for name, member in vars(cls).items():
            if name.startswith("_") or not inspect.isfunction(member):
                continue
            methods[name] = member
    return methods


def is_interface(cls: type) -> bool:
    """Protocols and ABCMeta classes qualify; plain concrete classes do not."""
    return getattr(cls, "_is_protocol", False) or isinstance(cls, abc.ABCMeta)


def compile_method(
    func: Callable[..., Any],
    name: str,
    interface_headers: tuple[tuple[str, str], ...],
) -> MethodDescriptor:
    """Compile a single interface method into its descriptor."""
    declarations = request_declarations(func)
    if not declarations:
        raise DeclarationError(
            f"Method {name} does not have a request decorator on it",
            method_name=name,
        )
    if len(declarations) > 1:
        raise DeclarationError(
            f"Method {name} has more than one request decorator on it",
            method_name=name,
        )
    declaration = declarations[0]

    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except (NameError, TypeError) as e:
        raise DeclarationError(
            f"Unable to resolve the annotations of method {name}: {e}",
            method_name=name,
            cause=e,
        ) from e

    signature = inspect.signature(func)
    parameters = list(signature.parameters.values())
    if not parameters or parameters[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise DeclarationError(
            f"Method {name} must take the instance as its first parameter",
            method_name=name,
        )

    grouping = classify_parameters(parameters[1:], hints, name)
    validate_path_params(declaration.path, grouping.path_param_names, method_name=name)
    return_kind, result_type = classify_return(func, hints, name)

    return MethodDescriptor(
        name=name,
        http_method=declaration.method,
        path=declaration.path,
        class_headers=interface_headers,
        method_headers=method_headers(func),
        parameters=grouping,
        return_kind=return_kind,
        result_type=result_type,
        signature=signature,
    )


def compile_interface(interface_type: type) -> InterfaceDescriptor:
    """
    Compile every request method of `interface_type`.

    Raises:
        DeclarationError: if the type is not a Protocol or ABC class, or any
            method is declared incorrectly. Nothing is returned for a
            partially valid interface.
    """
    if not inspect.isclass(interface_type):
        raise DeclarationError(f"{interface_type!r} is not a class")
    if not is_interface(interface_type):
        raise DeclarationError(
            f"{interface_type.__qualname__} is not an interface; declare it as a "
            "typing.Protocol or an abc.ABC subclass"
        )

    interface_headers = class_headers(interface_type)
    methods = tuple(
        compile_method(func, name, interface_headers)
        for name, func in request_methods(interface_type).items()
    )

    logger.debug(
        "Compiled interface %s: %d request method(s)",
        interface_type.__qualname__,
        len(methods),
    )
    return InterfaceDescriptor(
        interface_type=interface_type,
        class_headers=interface_headers,
        methods=methods,
    )
