"""
Declaration surface for rest-plan interfaces.

This module contains:
- Core types: HttpMethod, BodySerializationMethod
- Request decorators: get, post, put, delete, patch, head, options, trace
- The header decorator, usable on interface classes and methods
- Parameter markers attached with typing.Annotated:
  PathParam, QueryParam, HeaderParam, Body

Decorators only record metadata on the decorated object. Nothing is
validated here; the compiler reads the metadata back and rejects bad
declarations when the interface is first implemented.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])
D = TypeVar("D")

REQUESTS_ATTR = "__rest_plan_requests__"
HEADERS_ATTR = "__rest_plan_headers__"


class HttpMethod(str, Enum):
    """HTTP methods a request declaration can use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


class BodySerializationMethod(str, Enum):
    """How a body parameter is rendered by the backend."""

    SERIALIZED = "serialized"
    URL_ENCODED = "url_encoded"


@dataclass(frozen=True)
class RequestDeclaration:
    """HTTP verb and path template attached to an interface method."""

    method: HttpMethod
    path: str


# -----------------------------------------------------------------------------
# Parameter Markers
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class PathParam:
    """Substitute the argument into the `{name}` placeholder of the path."""

    name: str | None = None


@dataclass(frozen=True)
class QueryParam:
    """Send the argument as a query parameter."""

    name: str | None = None


@dataclass(frozen=True)
class HeaderParam:
    """Send the argument as the value of header `name`."""

    name: str


@dataclass(frozen=True)
class Body:
    """Send the argument as the request body."""

    serialization_method: BodySerializationMethod = BodySerializationMethod.SERIALIZED


ParameterMarker = PathParam | QueryParam | HeaderParam | Body


# -----------------------------------------------------------------------------
# Request Decorators
# -----------------------------------------------------------------------------


def request(method: HttpMethod | str, path: str) -> Callable[[F], F]:
    """
    Declare the HTTP request an interface method performs.

    The function is returned unchanged apart from the recorded declaration,
    so its signature and annotations stay available to the compiler.
    """
    declaration = RequestDeclaration(HttpMethod(method), path)

    def decorator(func: F) -> F:
        existing = getattr(func, REQUESTS_ATTR, ())
        setattr(func, REQUESTS_ATTR, (declaration, *existing))
        return func

    return decorator


def _make_request_decorator(method: HttpMethod) -> Callable[[str], Callable[[F], F]]:
    def method_decorator(path: str) -> Callable[[F], F]:
        return request(method, path)

    method_decorator.__name__ = method.value.lower()
    method_decorator.__doc__ = f"Declare a {method.value} request to `path`."
    return method_decorator


get = _make_request_decorator(HttpMethod.GET)
post = _make_request_decorator(HttpMethod.POST)
put = _make_request_decorator(HttpMethod.PUT)
delete = _make_request_decorator(HttpMethod.DELETE)
patch = _make_request_decorator(HttpMethod.PATCH)
head = _make_request_decorator(HttpMethod.HEAD)
options = _make_request_decorator(HttpMethod.OPTIONS)
trace = _make_request_decorator(HttpMethod.TRACE)


def header(name: str, value: str) -> Callable[[D], D]:
    """
    Attach a static header to an interface class or to a single method.

    Stacked decorators keep their source order (top to bottom). Class
    headers are read from the class itself only, never from its bases.
    """

    def decorator(target: D) -> D:
        if inspect.isclass(target):
            existing = vars(target).get(HEADERS_ATTR, ())
        else:
            existing = getattr(target, HEADERS_ATTR, ())
        setattr(target, HEADERS_ATTR, ((name, value), *existing))
        return target

    return decorator


def request_declarations(func: Callable[..., Any]) -> tuple[RequestDeclaration, ...]:
    """Return the request declarations recorded on `func`, in source order."""
    return getattr(func, REQUESTS_ATTR, ())


def method_headers(func: Callable[..., Any]) -> tuple[tuple[str, str], ...]:
    return getattr(func, HEADERS_ATTR, ())


def class_headers(cls: type) -> tuple[tuple[str, str], ...]:
    return vars(cls).get(HEADERS_ATTR, ())
