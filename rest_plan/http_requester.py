"""
httpx-backed Requester.

Renders a RequestInfo into an httpx.Request, sends it with an
httpx.AsyncClient, and turns the response into what the interface method
declared: nothing, a deserialized value, the raw response, or a
Response[T] envelope.

Serialization uses pydantic TypeAdapters, so bodies and results can be
pydantic models, dataclasses, TypedDicts or plain JSON types.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter

from .config import HTTP_ERROR_THRESHOLD
from .declarations import BodySerializationMethod
from .errors import ApiError, ContractViolation, RequestCancelledError
from .models import BodyParameterInfo, CancellationToken, RequestInfo, Response

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


@functools.lru_cache(maxsize=256)
def _type_adapter(result_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(result_type)


class HttpxRequester:
    """
    Requester performing requests with an httpx.AsyncClient.

    The client is not owned: whoever created it closes it. Relative paths
    resolve against the client's base_url.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    # -------------------------------------------------------------------------
    # Entry Points
    # -------------------------------------------------------------------------

    async def execute_void(self, info: RequestInfo) -> None:
        response = await self._send(info)
        self._ensure_success(response)

    async def execute_typed(self, info: RequestInfo, result_type: type[T]) -> T:
        response = await self._send(info)
        self._ensure_success(response)
        return self._deserialize(response, result_type)

    async def execute_raw_response(self, info: RequestInfo) -> httpx.Response:
        return await self._send(info)

    async def execute_envelope(self, info: RequestInfo, result_type: type[T]) -> Response[T]:
        response = await self._send(info)
        self._ensure_success(response)
        return Response(response, self._deserialize(response, result_type))

    # -------------------------------------------------------------------------
    # Request Rendering
    # -------------------------------------------------------------------------

    def build_request(self, info: RequestInfo) -> httpx.Request:
        """Render `info` into an httpx.Request without sending it."""
        body_kwargs = self._build_body(info.body_parameter_info)
        return self.client.build_request(
            method=info.method.value,
            url=self._build_url(info),
            params=self._build_query_params(info),
            headers=self._build_headers(info),
            **body_kwargs,
        )

    def _build_url(self, info: RequestInfo) -> str:
        """Build URL with path parameters substituted."""
        path = info.path
        for name, value in info.path_params:
            path = path.replace(f"{{{name}}}", quote(value or "", safe=""))
        return path

    def _build_query_params(self, info: RequestInfo) -> list[tuple[str, str]]:
        return [(name, value) for name, value in info.query_params if value is not None]

    def _build_headers(self, info: RequestInfo) -> httpx.Headers:
        """Class headers, then method headers, then header parameters; later ones win."""
        headers = httpx.Headers()
        for name, value in (*info.class_headers, *info.method_headers, *info.header_params):
            if value is None:
                continue
            headers[name] = value
        return headers

    def _build_body(self, body: BodyParameterInfo | None) -> dict[str, Any]:
        if body is None or body.value is None:
            return {}

        value = body.value
        if isinstance(value, (str, bytes)):
            return {"content": value}

        match body.serialization_method:
            case BodySerializationMethod.SERIALIZED:
                return {"json": _ANY_ADAPTER.dump_python(value, mode="json", by_alias=True)}
            case BodySerializationMethod.URL_ENCODED:
                return {"data": self._form_fields(value)}
            case _:
                raise ContractViolation(
                    f"Unknown body serialization method: {body.serialization_method!r}"
                )

    def _form_fields(self, value: Any) -> dict[str, str]:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not isinstance(value, Mapping):
            raise ContractViolation(
                f"A URL-encoded body must be a mapping or a pydantic model, "
                f"got {type(value).__name__}"
            )
        return {str(k): str(v) for k, v in value.items() if v is not None}

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    async def _send(self, info: RequestInfo) -> httpx.Response:
        token = info.cancellation_token
        token.raise_if_cancelled()

        request = self.build_request(info)
        logger.debug("Sending %s %s", request.method, request.url)

        if not token.can_be_cancelled:
            response = await self.client.send(request)
        else:
            response = await self._send_cancellable(request, token)

        logger.debug("Received %s for %s %s", response.status_code, request.method, request.url)
        return response

    async def _send_cancellable(
        self, request: httpx.Request, token: CancellationToken
    ) -> httpx.Response:
        send = asyncio.ensure_future(self.client.send(request))
        cancelled = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({send, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            send.cancel()
            raise
        finally:
            cancelled.cancel()

        if send.done():
            return send.result()

        send.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await send
        logger.debug("Cancelled %s %s", request.method, request.url)
        raise RequestCancelledError(f"{request.method} {request.url} was cancelled")

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _ensure_success(self, response: httpx.Response) -> None:
        if response.status_code >= HTTP_ERROR_THRESHOLD:
            raise ApiError(
                response.request.method,
                str(response.request.url),
                response.status_code,
                response.text,
                response=response,
            )

    def _deserialize(self, response: httpx.Response, result_type: Any) -> Any:
        if result_type is str:
            return response.text
        if result_type is bytes:
            return response.content
        return _type_adapter(result_type).validate_json(response.content)
