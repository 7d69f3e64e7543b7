"""
Injectable descriptors: how one concrete implementation is constructed and populated.

A ``Descriptor`` is the boundary between the container and whatever decided
where the injection points of an implementation are. The container only ever
consumes the ordered dependency refs and the two construction callbacks.
``InjectableDescriptor`` derives them from a class by signature and type hint
introspection; ``FunctionDescriptor`` derives them from a factory function.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Final, get_args, get_origin, get_type_hints

from .errors import IllegalComponentError
from .model.annotations import Scope, declared_scope, is_inject_marker, is_inject_method, is_qualifier
from .model.keys import ComponentRef


class Descriptor(ABC):
    """
    Describes how to build one implementation.

    ``dependencies()`` lists constructor refs first, then member refs (fields,
    then injection method parameters), in declaration order. The same order is
    used for the values handed back to ``instantiate`` and ``populate``.
    """

    def __init__(self, implementation: Any):
        self.implementation = implementation

    @abstractmethod
    def constructor_dependencies(self) -> list[ComponentRef]:
        """Get the refs whose resolved values are passed to ``instantiate``."""

    def member_dependencies(self) -> list[ComponentRef]:
        """Get the refs whose resolved values are passed to ``populate``."""
        return []

    def dependencies(self) -> list[ComponentRef]:
        return self.constructor_dependencies() + self.member_dependencies()

    @abstractmethod
    def instantiate(self, arguments: Sequence[Any]) -> Any:
        """Create the raw instance from resolved constructor arguments."""

    def populate(self, instance: Any, values: Sequence[Any]) -> None:  # noqa: ARG002
        """Apply field and method injections to a freshly created instance."""
        return None

    def declared_scope(self) -> type[Scope] | None:
        """Get the scope the implementation declares for itself, if any."""
        return None

    def __repr__(self) -> str:
        name = getattr(self.implementation, "__qualname__", repr(self.implementation))
        return f"{type(self).__name__}({name})"


@dataclass(frozen=True)
class InjectionPoint:
    """A single parameter or field that receives a resolved dependency."""

    name: str
    ref: ComponentRef
    keyword_only: bool = False


@dataclass(frozen=True)
class InjectionMethod:
    """A method called after construction with resolved arguments."""

    name: str
    parameters: tuple[InjectionPoint, ...]


class InjectableDescriptor(Descriptor):
    """
    Descriptor derived from a class by introspection.

    - Constructor: every ``__init__`` parameter without a default value.
    - Fields: class attributes annotated ``Annotated[T, Inject]``.
    - Methods: methods decorated with ``@inject``.

    Base class fields and methods come before those of subclasses.
    """

    def __init__(self, implementation: type):
        super().__init__(implementation)
        if not inspect.isclass(implementation):
            raise IllegalComponentError(implementation, "not a class")
        if inspect.isabstract(implementation):
            raise IllegalComponentError(implementation, "abstract classes cannot be instantiated")

        self._constructor = _constructor_points(implementation)
        self._fields = _field_points(implementation)
        self._methods = _injection_methods(implementation)

    @classmethod
    def of(cls, implementation: type) -> InjectableDescriptor:
        """Create the descriptor for a class."""
        return cls(implementation)

    @property
    def fields(self) -> list[InjectionPoint]:
        return list(self._fields)

    @property
    def methods(self) -> list[InjectionMethod]:
        return list(self._methods)

    def constructor_dependencies(self) -> list[ComponentRef]:
        return [point.ref for point in self._constructor]

    def member_dependencies(self) -> list[ComponentRef]:
        refs = [point.ref for point in self._fields]
        for method in self._methods:
            refs.extend(point.ref for point in method.parameters)
        return refs

    def instantiate(self, arguments: Sequence[Any]) -> Any:
        args, kwargs = _split_arguments(self._constructor, arguments)
        return self.implementation(*args, **kwargs)

    def populate(self, instance: Any, values: Sequence[Any]) -> None:
        remaining = iter(values)
        for point in self._fields:
            setattr(instance, point.name, next(remaining))
        for method in self._methods:
            method_values = [next(remaining) for _ in method.parameters]
            args, kwargs = _split_arguments(method.parameters, method_values)
            getattr(instance, method.name)(*args, **kwargs)

    def declared_scope(self) -> type[Scope] | None:
        return declared_scope(self.implementation)


class FunctionDescriptor(Descriptor):
    """Descriptor for a factory function whose parameters are its dependencies."""

    def __init__(self, factory: Callable[..., Any]):
        super().__init__(factory)
        if not callable(factory) or inspect.isclass(factory):
            raise IllegalComponentError(factory, "not a factory function")
        self._parameters = _parameter_points(factory, factory, skip_first=False)

    def constructor_dependencies(self) -> list[ComponentRef]:
        return [point.ref for point in self._parameters]

    def instantiate(self, arguments: Sequence[Any]) -> Any:
        args, kwargs = _split_arguments(self._parameters, arguments)
        return self.implementation(*args, **kwargs)


def _split_arguments(
    points: Sequence[InjectionPoint], values: Sequence[Any]
) -> tuple[list[Any], dict[str, Any]]:
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for point, value in zip(points, values, strict=True):
        if point.keyword_only:
            kwargs[point.name] = value
        else:
            args.append(value)
    return args, kwargs


def _type_hints(owner: Any, target: Any) -> dict[str, Any]:
    try:
        return get_type_hints(target, include_extras=True)
    except (NameError, TypeError) as e:
        raise IllegalComponentError(owner, f"cannot resolve type hints: {e}") from e


def _to_ref(owner: Any, hint: Any) -> ComponentRef:
    """Turn a (possibly ``Annotated``) hint into a ref, picking up its qualifier."""
    qualifier = None
    if get_origin(hint) is Annotated:
        qualifiers = [meta for meta in hint.__metadata__ if is_qualifier(meta)]
        if len(qualifiers) > 1:
            raise IllegalComponentError(owner, f"more than one qualifier on {hint!r}")
        qualifier = qualifiers[0] if qualifiers else None
        hint = get_args(hint)[0]
    return ComponentRef.of(hint, qualifier)


def _parameter_points(owner: Any, function: Callable[..., Any], skip_first: bool) -> tuple[InjectionPoint, ...]:
    type_params = getattr(function, "__type_params__", ())
    if type_params:
        raise IllegalComponentError(owner, f"{function.__name__} declares type parameters")

    hints = _type_hints(owner, function)
    try:
        parameters = list(inspect.signature(function).parameters.values())
    except ValueError as e:
        raise IllegalComponentError(owner, f"cannot inspect {function!r}: {e}") from e
    if skip_first:
        parameters = parameters[1:]

    points: list[InjectionPoint] = []
    for parameter in parameters:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if parameter.default is not inspect.Parameter.empty:
            # Parameters with defaults are left to the callee
            continue
        if parameter.name not in hints:
            raise IllegalComponentError(owner, f"parameter '{parameter.name}' has no type hint")
        points.append(
            InjectionPoint(
                parameter.name,
                _to_ref(owner, hints[parameter.name]),
                parameter.kind is inspect.Parameter.KEYWORD_ONLY,
            )
        )
    return tuple(points)


def _constructor_points(cls: type) -> tuple[InjectionPoint, ...]:
    init = cls.__init__
    if init is object.__init__:
        return ()
    return _parameter_points(cls, init, skip_first=True)


def _unwrap_field_hint(hint: Any) -> tuple[Any, bool]:
    """Strip ``Final`` from a field hint, reporting whether it was present."""
    if get_origin(hint) is Final:
        return get_args(hint)[0], True
    if get_origin(hint) is Annotated:
        inner = get_args(hint)[0]
        if get_origin(inner) is Final or inner is Final:
            inner_args = get_args(inner)
            base = inner_args[0] if inner_args else Any
            return Annotated[(base, *hint.__metadata__)], True
    return hint, hint is Final


def _mentions_inject(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return "Inject" in annotation
    if get_origin(annotation) is Annotated:
        return any(is_inject_marker(meta) for meta in annotation.__metadata__)
    return False


def _field_hints(cls: type, klass: type, annotations: dict[str, Any]) -> dict[str, Any]:
    """
    Resolve the annotations ``klass`` declares itself.

    When some of them cannot be resolved, each field is resolved on its own and
    the failures are dropped, unless the field is marked for injection.
    """
    try:
        return get_type_hints(klass, include_extras=True)
    except (NameError, TypeError):
        return _resolve_each_field(cls, klass, annotations)


def _resolve_each_field(cls: type, klass: type, annotations: dict[str, Any]) -> dict[str, Any]:
    hints: dict[str, Any] = {}
    for name, annotation in annotations.items():
        namespace = {"__module__": klass.__module__, "__annotations__": {name: annotation}}
        holder = type(klass.__name__, (), namespace)
        try:
            hints[name] = get_type_hints(holder, localns=dict(vars(klass)), include_extras=True)[name]
        except (NameError, TypeError) as e:
            if _mentions_inject(annotation):
                raise IllegalComponentError(cls, f"cannot resolve type hint of field '{name}': {e}") from e
    return hints


def _field_points(cls: type) -> tuple[InjectionPoint, ...]:
    points: list[InjectionPoint] = []
    seen: set[str] = set()
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        own_annotations = inspect.get_annotations(klass)
        if not own_annotations:
            continue
        hints = _field_hints(cls, klass, own_annotations)
        for name in own_annotations:
            hint, is_final = _unwrap_field_hint(hints.get(name))
            if get_origin(hint) is ClassVar or get_origin(hint) is not Annotated:
                continue
            if not any(is_inject_marker(meta) for meta in hint.__metadata__):
                continue
            if is_final:
                raise IllegalComponentError(cls, f"final field '{name}' cannot be injected")
            if name in seen:
                continue
            seen.add(name)
            points.append(InjectionPoint(name, _to_ref(cls, hint)))
    return tuple(points)


def _injection_methods(cls: type) -> tuple[InjectionMethod, ...]:
    methods: list[InjectionMethod] = []
    seen: set[str] = set()
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name in seen or not is_inject_method(member):
                continue
            seen.add(name)
            # The most derived definition decides whether the method is still injected
            resolved = inspect.getattr_static(cls, name)
            if not is_inject_method(resolved):
                continue
            methods.append(InjectionMethod(name, _parameter_points(cls, resolved, skip_first=True)))
    return tuple(methods)
