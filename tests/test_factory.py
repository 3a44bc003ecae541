"""
Tests for the proxy factory and its compiled-implementation cache.
"""

import inspect
import threading
import traceback
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from concurrent.futures import ThreadPoolExecutor
from typing import Annotated, Protocol

import pytest

import rest_plan.factory as factory_module
from conftest import ItemsApi, RecordingRequester
from rest_plan.declarations import Body, PathParam, get, post
from rest_plan.errors import DeclarationError, ImplementationCreationError
from rest_plan.factory import (
    CompiledImplementation,
    ImplementationFactory,
    create_implementation,
    default_factory,
)


# -----------------------------------------------------------------------------
# Cache Behaviour
# -----------------------------------------------------------------------------


class TestImplementationCache:
    def test_first_call_compiles_and_caches(self, factory):
        assert ItemsApi not in factory

        compiled = factory.get_or_compile(ItemsApi)

        assert isinstance(compiled, CompiledImplementation)
        assert ItemsApi in factory

    def test_second_call_returns_cached_value(self, factory, monkeypatch):
        first = factory.get_or_compile(ItemsApi)

        def fail(interface_type):
            raise AssertionError("recompiled a cached interface")

        monkeypatch.setattr(factory_module, "compile_interface", fail)

        assert factory.get_or_compile(ItemsApi) is first

    def test_factories_do_not_share_cache(self):
        first = ImplementationFactory().get_or_compile(ItemsApi)
        second = ImplementationFactory().get_or_compile(ItemsApi)

        assert first is not second
        assert first.descriptor == second.descriptor

    def test_concurrent_first_use_compiles_once(self, factory, monkeypatch):
        compile_calls = []
        original = factory_module.compile_interface

        def counting_compile(interface_type):
            compile_calls.append(interface_type)
            return original(interface_type)

        monkeypatch.setattr(factory_module, "compile_interface", counting_compile)

        workers = 16
        barrier = threading.Barrier(workers)

        def obtain(_):
            barrier.wait()
            return factory.get_or_compile(ItemsApi)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(obtain, range(workers)))

        assert len(compile_calls) == 1
        assert all(result is results[0] for result in results)

    def test_many_instances_share_one_compiled_implementation(self, factory):
        first = factory.create_implementation(ItemsApi, RecordingRequester())
        second = factory.create_implementation(ItemsApi, RecordingRequester())

        assert type(first) is type(second)
        assert first is not second


# -----------------------------------------------------------------------------
# Failure Handling
# -----------------------------------------------------------------------------


class BrokenApi(Protocol):
    @post("/upload")
    async def upload(self, a: Annotated[dict, Body()], b: Annotated[dict, Body()]) -> None: ...


class TestCompilationFailures:
    def test_failure_is_not_cached_as_implementation(self, factory):
        with pytest.raises(DeclarationError):
            factory.get_or_compile(BrokenApi)

        assert BrokenApi not in factory

    def test_failure_is_permanent(self, factory, monkeypatch):
        with pytest.raises(DeclarationError) as first:
            factory.get_or_compile(BrokenApi)

        def fail(interface_type):
            raise AssertionError("retried a failed compilation")

        monkeypatch.setattr(factory_module, "compile_interface", fail)

        with pytest.raises(DeclarationError) as second:
            factory.get_or_compile(BrokenApi)
        assert second.value is first.value

    def test_repeated_failures_keep_traceback_bounded(self, factory):
        def traceback_depth():
            with pytest.raises(DeclarationError) as exc_info:
                factory.get_or_compile(BrokenApi)
            return len(traceback.extract_tb(exc_info.value.__traceback__))

        traceback_depth()
        second = traceback_depth()
        depths = [traceback_depth() for _ in range(50)]

        assert set(depths) == {second}

    def test_concrete_class_failure_is_cached(self, factory):
        class Concrete:
            @get("/")
            async def index(self) -> None:
                return None

        for _ in range(2):
            with pytest.raises(DeclarationError) as exc_info:
                factory.get_or_compile(Concrete)
            assert "not an interface" in str(exc_info.value)
        assert Concrete not in factory

    def test_non_class_rejected(self, factory):
        with pytest.raises(DeclarationError):
            factory.get_or_compile("ItemsApi")

    def test_failure_is_logged(self, factory, caplog):
        with caplog.at_level("WARNING", logger="rest_plan.factory"):
            with pytest.raises(DeclarationError):
                factory.get_or_compile(BrokenApi)

        assert "upload" in caplog.text


class TestConstructionErrors:
    def test_refused_subclassing_is_wrapped(self, factory):
        class Sealed(Protocol):
            def __init_subclass__(cls, **kwargs):
                raise TypeError("Sealed cannot be subclassed")

            @get("/")
            async def index(self) -> None: ...

        with pytest.raises(ImplementationCreationError) as exc_info:
            factory.get_or_compile(Sealed)
        assert "Sealed" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, TypeError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert Sealed not in factory

    def test_unimplemented_abstract_member(self, factory):
        class Api(ABC):
            @property
            @abstractmethod
            def base_url(self) -> str: ...

            @get("/")
            async def index(self) -> None: ...

        with pytest.raises(ImplementationCreationError) as exc_info:
            factory.get_or_compile(Api)
        assert "base_url" in str(exc_info.value)


# -----------------------------------------------------------------------------
# Generated Implementations
# -----------------------------------------------------------------------------


class AbstractUsersApi(ABC):
    @get("/users/{id}")
    @abstractmethod
    async def get_user(self, id: Annotated[int, PathParam()]) -> dict:
        """Fetch one user."""


class TestGeneratedImplementation:
    def test_is_instance_of_interface(self, factory, requester):
        users = factory.create_implementation(AbstractUsersApi, requester)

        assert isinstance(users, AbstractUsersApi)

    def test_implementation_type_name(self, factory, requester):
        users = factory.create_implementation(AbstractUsersApi, requester)

        assert type(users).__name__ == "AbstractUsersApiImplementation"
        assert "bound to" in repr(users)

    def test_methods_keep_name_doc_and_signature(self, factory, requester):
        users = factory.create_implementation(AbstractUsersApi, requester)

        assert users.get_user.__name__ == "get_user"
        assert users.get_user.__doc__ == "Fetch one user."
        assert list(inspect.signature(users.get_user).parameters) == ["id"]

    async def test_methods_are_usable(self, factory, requester):
        users = factory.create_implementation(AbstractUsersApi, requester)

        await users.get_user(7)

        assert requester.last[1].path_params == [("id", "7")]

    def test_async_methods_are_coroutine_functions(self, items_api):
        assert inspect.iscoroutinefunction(items_api.get_item)
        assert inspect.iscoroutinefunction(type(items_api).create_item)

    def test_awaitable_returning_methods_stay_plain(self, factory, requester):
        class Api(Protocol):
            @get("/ping")
            def ping(self) -> Awaitable[None]: ...

        api = factory.create_implementation(Api, requester)

        assert not inspect.iscoroutinefunction(api.ping)

    def test_wrong_arguments_fail_synchronously(self, items_api):
        with pytest.raises(TypeError):
            items_api.get_item()

    def test_none_requester_rejected(self, factory):
        with pytest.raises(ValueError):
            factory.create_implementation(ItemsApi, None)


class TestModuleLevelHelpers:
    def test_explicit_factory_is_used(self, factory, requester):
        create_implementation(ItemsApi, requester, factory=factory)

        assert ItemsApi in factory

    def test_default_factory(self, requester):
        items = create_implementation(ItemsApi, requester)

        assert ItemsApi in default_factory
        assert isinstance(items, default_factory.get_or_compile(ItemsApi).implementation_type)
