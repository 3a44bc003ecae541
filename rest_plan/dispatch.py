"""
Executor dispatch.

At call time a generated method hands its bound arguments to
build_request_info, then invoke passes the description to the backend
entry point fixed at compile time by the method's return shape.
"""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from typing import Any

from .descriptors import MethodDescriptor, ReturnKind
from .models import CancellationToken, RequestInfo
from .requester import Requester


def _as_text(value: Any) -> str | None:
    return None if value is None else str(value)


def build_request_info(descriptor: MethodDescriptor, arguments: Sequence[Any]) -> RequestInfo:
    """
    Build the request description for one call.

    Args:
        descriptor: The compiled method.
        arguments: Bound argument values, index 0 being the receiver.
    """
    grouping = descriptor.parameters

    token = None
    if grouping.cancellation_token is not None:
        token = arguments[grouping.cancellation_token.index]
    if token is None:
        token = CancellationToken.none()

    info = RequestInfo(descriptor.http_method, descriptor.path, token)

    for name, value in descriptor.class_headers:
        info.add_class_header(name, value)
    for name, value in descriptor.method_headers:
        info.add_method_header(name, value)

    if grouping.body is not None:
        info.set_body_parameter_info(
            grouping.body.marker.serialization_method,
            arguments[grouping.body.index],
        )

    for parameter in grouping.query_parameters:
        info.add_query_parameter(parameter.key, _as_text(arguments[parameter.index]))
    for parameter in grouping.plain_parameters:
        info.add_query_parameter(parameter.name, _as_text(arguments[parameter.index]))

    for parameter in grouping.path_parameters:
        info.add_path_parameter(parameter.key, _as_text(arguments[parameter.index]))

    for parameter in grouping.header_parameters:
        info.add_header_parameter(parameter.key, _as_text(arguments[parameter.index]))

    return info


def invoke(requester: Requester, descriptor: MethodDescriptor, info: RequestInfo) -> Awaitable[Any]:
    """Call exactly one backend entry point and return its awaitable."""
    match descriptor.return_kind:
        case ReturnKind.VOID:
            return requester.execute_void(info)
        case ReturnKind.RAW_RESPONSE:
            return requester.execute_raw_response(info)
        case ReturnKind.ENVELOPE:
            return requester.execute_envelope(info, descriptor.result_type)
        case ReturnKind.TYPED:
            return requester.execute_typed(info, descriptor.result_type)
        case _:
            raise AssertionError(f"Unhandled return kind {descriptor.return_kind!r}")
