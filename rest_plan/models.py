"""
Request and response models exchanged between proxies and backends.

RequestInfo is the per-call accumulator a generated method fills in and
hands to the backend. Response[T] is the envelope returned by the
envelope entry point. CancellationToken is the value used to plumb
cancellation through to the backend.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, TypeVar

import httpx

from .declarations import BodySerializationMethod, HttpMethod
from .errors import ContractViolation, RequestCancelledError

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Cancellation
# -----------------------------------------------------------------------------


class CancellationToken:
    """
    Cancellation signal passed to a request method.

    A token must be cancelled from the event loop it is awaited on.
    `CancellationToken.none()` is the shared inert token used when a method
    declares no cancellation parameter.
    """

    _none: ClassVar[CancellationToken]

    def __init__(self, *, can_be_cancelled: bool = True) -> None:
        self.can_be_cancelled = can_be_cancelled
        self._cancelled = False
        self._event: asyncio.Event | None = None

    @classmethod
    def none(cls) -> CancellationToken:
        return cls._none

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if not self.can_be_cancelled:
            raise ContractViolation("The inert cancellation token cannot be cancelled")
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError("The request was cancelled")

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def __repr__(self) -> str:
        if not self.can_be_cancelled:
            return "CancellationToken.none()"
        return f"CancellationToken(cancelled={self._cancelled})"


CancellationToken._none = CancellationToken(can_be_cancelled=False)


# -----------------------------------------------------------------------------
# Request Description
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class BodyParameterInfo:
    """Raw body value plus how the backend should serialize it."""

    serialization_method: BodySerializationMethod
    value: Any


@dataclass
class RequestInfo:
    """
    Everything a backend needs to perform one request.

    Built fresh for every call and never shared. Entries keep the order in
    which the interface declared them. Values are the textual form of the
    live arguments, or None when the argument was None.
    """

    method: HttpMethod
    path: str
    cancellation_token: CancellationToken = field(default_factory=CancellationToken.none)
    class_headers: list[tuple[str, str]] = field(default_factory=list)
    method_headers: list[tuple[str, str]] = field(default_factory=list)
    header_params: list[tuple[str, str | None]] = field(default_factory=list)
    query_params: list[tuple[str, str | None]] = field(default_factory=list)
    path_params: list[tuple[str, str | None]] = field(default_factory=list)
    body_parameter_info: BodyParameterInfo | None = None

    def add_class_header(self, name: str, value: str) -> None:
        self.class_headers.append((name, value))

    def add_method_header(self, name: str, value: str) -> None:
        self.method_headers.append((name, value))

    def add_header_parameter(self, name: str, value: str | None) -> None:
        self.header_params.append((name, value))

    def add_query_parameter(self, name: str, value: str | None) -> None:
        self.query_params.append((name, value))

    def add_path_parameter(self, name: str, value: str | None) -> None:
        self.path_params.append((name, value))

    def set_body_parameter_info(
        self, serialization_method: BodySerializationMethod, value: Any
    ) -> None:
        if self.body_parameter_info is not None:
            raise ContractViolation(
                f"A body has already been attached to {self.method.value} {self.path}"
            )
        self.body_parameter_info = BodyParameterInfo(serialization_method, value)


# -----------------------------------------------------------------------------
# Response Envelope
# -----------------------------------------------------------------------------


@dataclass
class Response(Generic[T]):
    """The raw HTTP response together with its deserialized content."""

    response: httpx.Response
    content: T

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def string_content(self) -> str:
        return self.response.text
