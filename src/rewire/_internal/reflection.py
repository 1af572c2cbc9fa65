from __future__ import annotations

import dataclasses
import inspect
import types
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from inspect import Parameter
from typing import Annotated, Any, ForwardRef, Union, get_args, get_origin, get_type_hints

from rewire._internal.type_checks import format_identifier, is_runtime_class
from rewire.defaults import DEFAULT_BUILTIN_TYPES
from rewire.markers import Interface


class _BuiltinType:
    """Declared type of parameters that are never resolved through the container."""

    def __repr__(self) -> str:
        return "builtin"


BUILTIN: Any = _BuiltinType()

_SKIPPED_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
_POSITIONAL_KINDS = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one injectable parameter of a constructor or callable.

    ``declared_type`` is a class, an ``Interface`` token, ``BUILTIN`` for
    primitives and unannotated parameters, or ``None`` when the annotation
    could not be evaluated.
    """

    name: str
    position: int
    kind: Any
    declared_type: Any
    has_default: bool = False
    default: Any = None
    default_factory: Callable[[], Any] | None = None

    @property
    def is_builtin(self) -> bool:
        return self.declared_type is BUILTIN

    @property
    def is_positional(self) -> bool:
        return self.kind in _POSITIONAL_KINDS

    def default_value(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


@dataclass(frozen=True, slots=True)
class Reflection:
    """Reflected view of a constructible type or a callable."""

    target: Any
    instantiable: bool
    parameters: tuple[ParameterDescriptor, ...] = ()

    @property
    def name(self) -> str:
        return format_identifier(self.target)

    def is_instantiable(self) -> bool:
        return self.instantiable

    def invoke(self, args: Iterable[Any], kwargs: dict[str, Any]) -> Any:
        return self.target(*args, **kwargs)


class Reflector:
    """Report constructor and callable parameters through runtime introspection.

    Parameter metadata comes from ``inspect.signature`` and annotations from
    ``typing.get_type_hints``. Class reflections are cached per class; callable
    reflections are computed on every call because bound methods are created
    anew on each attribute access.
    """

    def __init__(self, builtin_types: Iterable[type[Any]] = DEFAULT_BUILTIN_TYPES) -> None:
        self._builtin_types = frozenset(builtin_types)
        self._cache: dict[type[Any], Reflection] = {}

    def reflect(self, target: Any) -> Reflection:
        """Reflect ``target`` as a constructible type.

        Non-class identifiers (names and interface tokens), abstract base
        classes and protocols reflect as not instantiable.
        """
        if not is_runtime_class(target):
            return Reflection(target=target, instantiable=False)

        cached = self._cache.get(target)
        if cached is not None:
            return cached

        if inspect.isabstract(target) or getattr(target, "_is_protocol", False):
            reflection = Reflection(target=target, instantiable=False)
        else:
            reflection = Reflection(
                target=target,
                instantiable=True,
                parameters=self._describe(target, self._class_type_hints(target)),
            )

        self._cache[target] = reflection
        return reflection

    def reflect_callable(self, func: Callable[..., Any]) -> Reflection:
        hints_source = func
        if not inspect.isroutine(func) and not is_runtime_class(func):
            hints_source = getattr(func, "__call__", func)  # noqa: B004
        return Reflection(
            target=func,
            instantiable=True,
            parameters=self._describe(func, self._type_hints(hints_source)),
        )

    def _describe(
        self,
        target: Callable[..., Any],
        hints: dict[str, Any],
    ) -> tuple[ParameterDescriptor, ...]:
        try:
            signature = inspect.signature(target)
        except (TypeError, ValueError):
            return ()

        factories = self._dataclass_default_factories(target)
        descriptors: list[ParameterDescriptor] = []
        for parameter in signature.parameters.values():
            if parameter.kind in _SKIPPED_KINDS:
                continue

            annotation = hints.get(parameter.name, parameter.annotation)
            default_factory = factories.get(parameter.name)
            descriptors.append(
                ParameterDescriptor(
                    name=parameter.name,
                    position=len(descriptors),
                    kind=parameter.kind,
                    declared_type=self._declared_type(annotation),
                    has_default=parameter.default is not Parameter.empty,
                    default=None if parameter.default is Parameter.empty else parameter.default,
                    default_factory=default_factory,
                ),
            )
        return tuple(descriptors)

    def _declared_type(self, annotation: Any) -> Any:
        if annotation is Parameter.empty or annotation is Any:
            return BUILTIN

        if isinstance(annotation, Interface):
            return annotation

        if isinstance(annotation, (str, ForwardRef)):
            return None

        origin = get_origin(annotation)
        if origin is Annotated:
            inner, *metadata = get_args(annotation)
            for item in metadata:
                if isinstance(item, Interface):
                    return item
            return self._declared_type(inner)

        if origin is Union or origin is types.UnionType:
            members = [member for member in get_args(annotation) if member is not type(None)]
            if len(members) == 1:
                return self._declared_type(members[0])
            return BUILTIN

        if is_runtime_class(annotation) and not self._is_builtin_class(annotation):
            return annotation

        if is_runtime_class(origin) and not self._is_builtin_class(origin):
            return origin

        return BUILTIN

    def _is_builtin_class(self, cls: type[Any]) -> bool:
        if cls in self._builtin_types or cls.__module__ == "builtins":
            return True
        # object closes every MRO and is only a primitive as an exact match
        return any(base in self._builtin_types for base in cls.__mro__[:-1])

    def _class_type_hints(self, cls: type[Any]) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for member_name in ("__init__", "__new__"):
            member = getattr(cls, member_name, None)
            if member is None or member in (object.__init__, object.__new__):
                continue
            for name, hint in self._type_hints(member).items():
                merged.setdefault(name, hint)
        return merged

    def _type_hints(self, source: Any) -> dict[str, Any]:
        try:
            return get_type_hints(source, include_extras=True)
        except (AttributeError, NameError, TypeError):
            return {}

    def _dataclass_default_factories(self, target: Any) -> dict[str, Callable[[], Any]]:
        if not (is_runtime_class(target) and dataclasses.is_dataclass(target)):
            return {}
        return {
            field.name: field.default_factory
            for field in dataclasses.fields(target)
            if field.default_factory is not dataclasses.MISSING
        }
