"""
rest-plan Failure Types

All failures raised by rest-plan are instances of these types.
Failures coming from a backend's transport (httpx errors and the like)
are passed through unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class RestPlanError(Exception):
    """Base class for all rest-plan failures."""

    failure_category: str = "unknown"

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DeclarationError(RestPlanError):
    """
    An interface declaration cannot be compiled into request descriptors.

    - Fatality: Permanent for the interface type. Never retried.
    - Raised at compile time, before any request is attempted.
    """

    failure_category = "declaration_error"

    def __init__(
        self,
        message: str,
        *,
        method_name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.method_name = method_name


class ImplementationCreationError(RestPlanError):
    """
    The implementation class for a valid interface could not be built.

    - Fatality: Permanent for the interface type.
    - The underlying error is kept as `cause`.
    """

    failure_category = "implementation_creation_error"


class ContractViolation(RestPlanError):
    """A request description or body violates an internal invariant."""

    failure_category = "contract_violation"


class ApiError(RestPlanError):
    """
    The remote API answered with a non-success status code.

    Raised by HttpxRequester for the void, typed and envelope entry points.
    """

    failure_category = "api_error"

    def __init__(
        self,
        method: str,
        url: str,
        status_code: int,
        content: str,
        *,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(
            f"{method} {url} failed with status code {status_code}",
        )
        self.method = method
        self.url = url
        self.status_code = status_code
        self.content = content
        self.response = response


class RequestCancelledError(RestPlanError):
    """The request's cancellation token was cancelled before it completed."""

    failure_category = "request_cancelled"
