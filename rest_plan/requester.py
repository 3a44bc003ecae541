"""Execution backend interface consumed by generated implementations."""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

import httpx

from .models import RequestInfo, Response

T = TypeVar("T")


@runtime_checkable
class Requester(Protocol):
    """
    Performs the requests described by RequestInfo.

    Each generated method calls exactly one of these entry points, chosen
    by its declared result shape. Failures raised here reach the caller of
    the interface method unchanged.
    """

    async def execute_void(self, info: RequestInfo) -> None: ...

    async def execute_typed(self, info: RequestInfo, result_type: type[T]) -> T: ...

    async def execute_raw_response(self, info: RequestInfo) -> httpx.Response: ...

    async def execute_envelope(
        self, info: RequestInfo, result_type: type[T]
    ) -> Response[T]: ...
