"""
Parameter role classification.

Each declared parameter of an interface method is routed to exactly one
role, by the metadata attached to it with typing.Annotated:

    CancellationToken type > Body > QueryParam > PathParam > HeaderParam > plain

Plain parameters carry no marker and are sent as query parameters under
their declared name.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Generic, TypeVar, Union, get_args, get_origin

from .declarations import Body, HeaderParam, PathParam, QueryParam
from .errors import DeclarationError
from .models import CancellationToken

M = TypeVar("M")

_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class IndexedParameter(Generic[M]):
    """
    A declared parameter and its position in the bound argument list.

    Index 0 is the receiver (`self`); declared parameters start at 1.
    """

    index: int
    name: str
    marker: M | None = None

    @property
    def key(self) -> str:
        """The name the parameter is sent under: the marker's override, else its own."""
        override = getattr(self.marker, "name", None)
        return override if override is not None else self.name


@dataclass(frozen=True)
class ParameterGrouping:
    """Role classification of one method's parameters. Order is declaration order."""

    path_parameters: tuple[IndexedParameter[PathParam], ...] = ()
    query_parameters: tuple[IndexedParameter[QueryParam], ...] = ()
    header_parameters: tuple[IndexedParameter[HeaderParam], ...] = ()
    plain_parameters: tuple[IndexedParameter[None], ...] = ()
    body: IndexedParameter[Body] | None = None
    cancellation_token: IndexedParameter[None] | None = None

    @property
    def path_param_names(self) -> list[str]:
        return [parameter.key for parameter in self.path_parameters]

    def __len__(self) -> int:
        return (
            len(self.path_parameters)
            + len(self.query_parameters)
            + len(self.header_parameters)
            + len(self.plain_parameters)
            + (self.body is not None)
            + (self.cancellation_token is not None)
        )


def split_annotation(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split `Annotated[T, *metadata]` into `(T, metadata)`."""
    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        return base, tuple(metadata)
    return annotation, ()


def _first(metadata: Sequence[Any], marker_type: type[M]) -> M | None:
    for item in metadata:
        if isinstance(item, marker_type):
            return item
    return None


def _strip_optional(annotation: Any) -> Any:
    """`T | None` and `Optional[T]` -> `T`; anything else unchanged."""
    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _is_cancellation_type(annotation: Any) -> bool:
    annotation = _strip_optional(annotation)
    return inspect.isclass(annotation) and issubclass(annotation, CancellationToken)


def classify_parameters(
    parameters: Sequence[inspect.Parameter],
    hints: Mapping[str, Any],
    method_name: str,
) -> ParameterGrouping:
    """
    Classify `parameters` (receiver excluded) into request roles.

    Args:
        parameters: The declared parameters, in order, without `self`.
        hints: Resolved type hints of the method, with Annotated extras kept.
        method_name: Used in error messages.

    Raises:
        DeclarationError: on a second cancellation token, a second body, or
            a variadic parameter.
    """
    path_parameters: list[IndexedParameter[PathParam]] = []
    query_parameters: list[IndexedParameter[QueryParam]] = []
    header_parameters: list[IndexedParameter[HeaderParam]] = []
    plain_parameters: list[IndexedParameter[None]] = []
    body: IndexedParameter[Body] | None = None
    cancellation_token: IndexedParameter[None] | None = None

    for index, parameter in enumerate(parameters, start=1):
        name = parameter.name
        if parameter.kind in _VARIADIC_KINDS:
            raise DeclarationError(
                f"Parameter {name} of method {method_name} is variadic; "
                "request methods need explicitly named parameters",
                method_name=method_name,
            )

        base, metadata = split_annotation(hints.get(name, parameter.annotation))

        if _is_cancellation_type(base):
            if cancellation_token is not None:
                raise DeclarationError(
                    f"Found more than one parameter of type CancellationToken "
                    f"for method {method_name}",
                    method_name=method_name,
                )
            cancellation_token = IndexedParameter(index, name)
            continue

        body_marker = _first(metadata, Body)
        if body_marker is not None:
            if body is not None:
                raise DeclarationError(
                    f"Found more than one parameter with a Body marker "
                    f"for method {method_name}",
                    method_name=method_name,
                )
            body = IndexedParameter(index, name, body_marker)
            continue

        query_marker = _first(metadata, QueryParam)
        if query_marker is not None:
            query_parameters.append(IndexedParameter(index, name, query_marker))
            continue

        path_marker = _first(metadata, PathParam)
        if path_marker is not None:
            path_parameters.append(IndexedParameter(index, name, path_marker))
            continue

        header_marker = _first(metadata, HeaderParam)
        if header_marker is not None:
            header_parameters.append(IndexedParameter(index, name, header_marker))
            continue

        plain_parameters.append(IndexedParameter(index, name))

    return ParameterGrouping(
        path_parameters=tuple(path_parameters),
        query_parameters=tuple(query_parameters),
        header_parameters=tuple(header_parameters),
        plain_parameters=tuple(plain_parameters),
        body=body,
        cancellation_token=cancellation_token,
    )
