import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from inspect import Parameter
from pathlib import Path
from typing import Annotated, Any, Generic, Optional, Protocol, TypeVar, Union

import pytest

from rewire import BUILTIN, Interface
from rewire._internal.reflection import Reflector

T = TypeVar("T")

CacheToken = Interface("cache")


class _Dependency:
    pass


class _Other:
    pass


class _Box(Generic[T]):
    pass


class _Abstract(ABC):
    @abstractmethod
    def run(self) -> None: ...


class _Port(Protocol):
    def send(self) -> None: ...


class _Label(str):
    pass


class _Consumer:
    def __init__(
        self,
        dependency: _Dependency,
        name: str,
        /,
        untyped,  # noqa: ANN001
        *args: Any,
        cache: Annotated[object, CacheToken],
        maybe: Optional[_Dependency] = None,  # noqa: UP045
        either: Union[_Dependency, _Other] = None,  # type: ignore[assignment]  # noqa: UP007
        box: _Box[int] = None,  # type: ignore[assignment]
        path: Path = Path(),
        **kwargs: Any,
    ) -> None:
        pass


class _StringForward:
    def __init__(self, dependency: "_Dependency", missing: "_Nowhere") -> None:  # type: ignore[name-defined]  # noqa: F821
        pass


@dataclass
class _Settings:
    dependency: _Dependency
    values: list[int] = field(default_factory=list)


@pytest.fixture()
def reflector() -> Reflector:
    return Reflector()


def test_parameters_keep_declaration_order_and_skip_variadics(reflector: Reflector) -> None:
    reflection = reflector.reflect(_Consumer)

    assert [p.name for p in reflection.parameters] == [
        "dependency",
        "name",
        "untyped",
        "cache",
        "maybe",
        "either",
        "box",
        "path",
    ]
    assert [p.position for p in reflection.parameters] == list(range(8))


def test_declared_types(reflector: Reflector) -> None:
    types = {p.name: p.declared_type for p in reflector.reflect(_Consumer).parameters}

    assert types["dependency"] is _Dependency
    assert types["name"] is BUILTIN
    assert types["untyped"] is BUILTIN
    assert types["cache"] is CacheToken
    assert types["maybe"] is _Dependency
    assert types["either"] is BUILTIN
    assert types["box"] is _Box
    assert types["path"] is BUILTIN


def test_parameter_kinds_and_defaults(reflector: Reflector) -> None:
    parameters = {p.name: p for p in reflector.reflect(_Consumer).parameters}

    assert parameters["dependency"].kind is Parameter.POSITIONAL_ONLY
    assert parameters["dependency"].is_positional
    assert not parameters["cache"].is_positional
    assert not parameters["cache"].has_default
    assert parameters["maybe"].has_default
    assert parameters["maybe"].default_value() is None


def test_subclass_of_builtin_is_primitive(reflector: Reflector) -> None:
    def handler(label: _Label, identifier: uuid.UUID) -> None:
        pass

    declared = [p.declared_type for p in reflector.reflect_callable(handler).parameters]

    assert declared == [BUILTIN, BUILTIN]


def test_custom_builtin_types() -> None:
    reflector = Reflector(builtin_types={_Dependency})

    def handler(dependency: _Dependency, other: _Other) -> None:
        pass

    declared = [p.declared_type for p in reflector.reflect_callable(handler).parameters]

    assert declared == [BUILTIN, _Other]


def test_string_forward_references(reflector: Reflector) -> None:
    parameters = reflector.reflect(_StringForward).parameters

    assert [p.declared_type for p in parameters] == [None, None]


def test_dataclass_default_factory(reflector: Reflector) -> None:
    values = reflector.reflect(_Settings).parameters[1]

    assert values.has_default
    assert values.default_value() == []
    assert values.default_value() is not values.default_value()


@pytest.mark.parametrize("target", [_Abstract, _Port, "name", CacheToken])
def test_not_instantiable_targets(reflector: Reflector, target: object) -> None:
    reflection = reflector.reflect(target)

    assert not reflection.is_instantiable()
    assert reflection.parameters == ()


def test_class_reflections_are_cached(reflector: Reflector) -> None:
    assert reflector.reflect(_Consumer) is reflector.reflect(_Consumer)


def test_reflection_name_and_invoke(reflector: Reflector) -> None:
    reflection = reflector.reflect(_Settings)
    dependency = _Dependency()

    instance = reflection.invoke([dependency], {})

    assert reflection.name == "_Settings"
    assert instance.dependency is dependency


def test_callable_object_uses_call_annotations(reflector: Reflector) -> None:
    class Handler:
        def __call__(self, dependency: _Dependency) -> None:
            pass

    parameters = reflector.reflect_callable(Handler()).parameters

    assert [p.declared_type for p in parameters] == [_Dependency]
