"""
Proxy factory and compiled-implementation cache.

ImplementationFactory compiles an interface once, synthesizes a subclass
whose methods build requests from the compiled descriptors, and caches the
result by interface type. Instances of that subclass are bound to one
Requester each.
"""

from __future__ import annotations

import functools
import inspect
import logging
import threading
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from .descriptors import InterfaceDescriptor, MethodDescriptor, compile_interface
from .dispatch import build_request_info, invoke
from .errors import DeclarationError, ImplementationCreationError, RestPlanError
from .requester import Requester

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUESTER_ATTR = "_rest_plan_requester"


def _make_method(descriptor: MethodDescriptor, original: Callable[..., Any]) -> Callable[..., Any]:
    signature = descriptor.signature

    def method(self: Any, *args: Any, **kwargs: Any) -> Any:
        bound = signature.bind(self, *args, **kwargs)
        bound.apply_defaults()
        info = build_request_info(descriptor, tuple(bound.arguments.values()))
        return invoke(getattr(self, REQUESTER_ATTR), descriptor, info)

    # Keep name, docstring and signature; drop abstract flags and declarations
    functools.update_wrapper(method, original, updated=())
    if inspect.iscoroutinefunction(original):
        # Binding errors still raise at call time, before any awaiting
        inspect.markcoroutinefunction(method)
    return method


def _init(self: Any, requester: Requester) -> None:
    setattr(self, REQUESTER_ATTR, requester)


def _repr(self: Any) -> str:
    return f"<{type(self).__qualname__} bound to {getattr(self, REQUESTER_ATTR)!r}>"


def build_implementation_class(descriptor: InterfaceDescriptor) -> type:
    """
    Synthesize the implementation class for a compiled interface.

    Raises:
        ImplementationCreationError: if the interface cannot be subclassed,
            or the subclass would still be abstract.
    """
    interface_type = descriptor.interface_type
    namespace: dict[str, Any] = {
        "__init__": _init,
        "__repr__": _repr,
        "__module__": interface_type.__module__,
        "__qualname__": f"{interface_type.__qualname__}Implementation",
    }
    for method_descriptor in descriptor.methods:
        original = getattr(interface_type, method_descriptor.name)
        namespace[method_descriptor.name] = _make_method(method_descriptor, original)

    name = f"{interface_type.__name__}Implementation"
    try:
        implementation = types.new_class(
            name, (interface_type,), exec_body=lambda ns: ns.update(namespace)
        )
    except TypeError as e:
        raise ImplementationCreationError(
            f"Unable to create implementation for interface "
            f"{interface_type.__qualname__}: {e}",
            cause=e,
        ) from e

    if inspect.isabstract(implementation):
        missing = ", ".join(sorted(implementation.__abstractmethods__))
        raise ImplementationCreationError(
            f"Unable to create implementation for interface "
            f"{interface_type.__qualname__}: abstract members without a "
            f"request declaration: {missing}"
        )
    return implementation


@dataclass(frozen=True)
class CompiledImplementation:
    """A compiled interface and its generated implementation class."""

    descriptor: InterfaceDescriptor
    implementation_type: type

    def instantiate(self, requester: Requester) -> Any:
        """Bind a new implementation instance to `requester`."""
        if requester is None:
            raise ValueError("requester must not be None")
        return self.implementation_type(requester)


class ImplementationFactory:
    """
    Compiles interfaces on first use and caches the result per type.

    The cache is never evicted. Compilation happens under a lock, so
    concurrent first requests for a type compile it exactly once and all
    observe the same CompiledImplementation. A failed compilation is
    remembered and raised again without recompiling.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._compiled: dict[type, CompiledImplementation] = {}
        self._failures: dict[type, RestPlanError] = {}

    def get_or_compile(self, interface_type: type) -> CompiledImplementation:
        if not inspect.isclass(interface_type):
            raise DeclarationError(f"{interface_type!r} is not a class")

        compiled = self._compiled.get(interface_type)
        if compiled is not None:
            logger.debug("Cache hit for %s", interface_type.__qualname__)
            return compiled

        with self._lock:
            compiled = self._compiled.get(interface_type)
            if compiled is not None:
                return compiled
            failure = self._failures.get(interface_type)
            if failure is not None:
                # Fresh traceback on every re-raise
                raise failure.with_traceback(None)

            try:
                descriptor = compile_interface(interface_type)
                compiled = CompiledImplementation(
                    descriptor, build_implementation_class(descriptor)
                )
            except (DeclarationError, ImplementationCreationError) as e:
                logger.warning("Unable to implement %r: %s", interface_type, e)
                self._failures[interface_type] = e
                raise

            self._compiled[interface_type] = compiled
            logger.debug("Cached implementation for %s", interface_type.__qualname__)
            return compiled

    def create_implementation(self, interface_type: type[T], requester: Requester) -> T:
        """Compile `interface_type` if needed and bind an instance to `requester`."""
        return self.get_or_compile(interface_type).instantiate(requester)

    def __contains__(self, interface_type: object) -> bool:
        return interface_type in self._compiled


default_factory = ImplementationFactory()


def create_implementation(
    interface_type: type[T],
    requester: Requester,
    *,
    factory: ImplementationFactory | None = None,
) -> T:
    """Bind an implementation of `interface_type` to `requester`."""
    if factory is None:
        factory = default_factory
    return factory.create_implementation(interface_type, requester)
