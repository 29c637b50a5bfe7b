"""Annotation types, designator meta-marking, and annotation lookups.

An annotation is any immutable object attached to a member or to one of its
parameters. Its annotation type is exactly ``type(annotation)``. Annotation
types play a *qualifier* or *scope* role when they are decorated with
:func:`qualifier` or :func:`scope`.
"""

import inspect
from dataclasses import dataclass, fields
from enum import Enum
from typing import (
    Annotated,
    Any,
    Callable,
    FrozenSet,
    Iterable,
    Optional,
    Tuple,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

from polreflect.exceptions import AmbiguousMetadata

T = TypeVar("T", bound=type)
F = TypeVar("F")

DESIGNATORS_ATTR = "__designators__"
ANNOTATIONS_ATTR = "__polreflect_annotations__"


class Designator(Enum):
    """The role an annotation type plays for the resolver.

    Examples:
        >>> Designator.QUALIFIER
        <Designator.QUALIFIER: 'qualifier'>
    """

    QUALIFIER = "qualifier"
    SCOPE = "scope"


@dataclass(frozen=True)
class Annotation:
    """Convenience base class for annotation types.

    Subclasses should be frozen dataclasses as well.

    Examples:
        >>> @dataclass(frozen=True)
        ... class Retries(Annotation):
        ...     count: int
        >>> Retries(3).annotation_type.__name__
        'Retries'
    """

    @property
    def annotation_type(self) -> type:
        return type(self)

    def __str__(self) -> str:
        values = ", ".join(f"{f.name}={getattr(self, f.name)!r}" for f in fields(self))
        return f"@{type_name(type(self))}({values})"


def type_name(annotation_type: type) -> str:
    """Return the fully qualified name used in diagnostics."""
    return f"{annotation_type.__module__}.{annotation_type.__qualname__}"


def _designate(annotation_type: T, designator: Designator) -> T:
    if not inspect.isclass(annotation_type):
        raise TypeError(
            f"@{designator.value} can only mark annotation types, "
            f"got {type(annotation_type).__name__}"
        )
    current = designators_of(annotation_type)
    setattr(annotation_type, DESIGNATORS_ATTR, current | {designator})
    return annotation_type


def qualifier(annotation_type: T) -> T:
    """Mark an annotation type as a qualifier designator."""
    return _designate(annotation_type, Designator.QUALIFIER)


def scope(annotation_type: T) -> T:
    """Mark an annotation type as a scope designator."""
    return _designate(annotation_type, Designator.SCOPE)


def designators_of(annotation_type: type) -> FrozenSet[Designator]:
    """Return the designators marked directly on *annotation_type*.

    Designators are read from the class's own dictionary, so subclasses of a
    qualifier type are not qualifiers unless marked themselves.
    """
    return frozenset(vars(annotation_type).get(DESIGNATORS_ATTR, ()))


@qualifier
@dataclass(frozen=True)
class Named(Annotation):
    """String qualifier distinguishing bindings of the same type."""

    value: str


@scope
@dataclass(frozen=True)
class Singleton(Annotation):
    """Scope for bindings created once per graph."""


@dataclass(frozen=True)
class Inject(Annotation):
    """Marks a member the resolver should inject."""


def annotated(*annotations: Any) -> Callable[[F], F]:
    """Attach annotations to a function or class.

    Stacked decorators keep source order: the top-most decorator's
    annotations come first.

    Examples:
        >>> @annotated(Inject())
        ... @annotated(Named("primary"))
        ... def provide_url() -> str:
        ...     return "postgresql://localhost/app"
        >>> [type(a).__name__ for a in annotations_of(provide_url)]
        ['Inject', 'Named']
    """

    def decorator(inner: F) -> F:
        existing = annotations_of(inner)
        holder = inner
        if isinstance(inner, (staticmethod, classmethod)):
            holder = inner.__func__
        setattr(holder, ANNOTATIONS_ATTR, tuple(annotations) + existing)
        return inner

    return decorator


def annotations_of(obj: Any) -> Tuple[Any, ...]:
    """Return the annotations attached directly to *obj*.

    Annotations on a base class are not inherited.
    """
    if isinstance(obj, (staticmethod, classmethod)):
        obj = obj.__func__
    if not hasattr(obj, "__dict__"):
        return ()
    return tuple(vars(obj).get(ANNOTATIONS_ATTR, ()))


def parameter_annotations(
    func: Callable[..., Any], skip_receiver: bool = False
) -> Tuple[Tuple[Any, ...], ...]:
    """Return the ``Annotated`` extras of each parameter of *func*.

    With *skip_receiver* the first parameter (the instance or class a
    method is bound to) is left out, whatever its name. Extras that are not
    :class:`Annotation` instances or annotation types marked with a
    designator are ignored, so unrelated ``Annotated`` metadata does not
    leak in.

    Examples:
        >>> def connect(url: Annotated[str, Named("db")], retries: int) -> None:
        ...     pass
        >>> parameter_annotations(connect)
        ((Named(value='db'),), ())
    """
    try:
        hints = get_type_hints(func, include_extras=True)
    except (NameError, TypeError):
        hints = dict(getattr(func, "__annotations__", {}))
    try:
        sig = inspect.signature(func)
    except (ValueError, TypeError):
        return ()

    result = []
    names = list(sig.parameters)
    if skip_receiver:
        names = names[1:]
    for name in names:
        hint = hints.get(name)
        if get_origin(hint) is Annotated:
            extras = get_args(hint)[1:]
            result.append(tuple(e for e in extras if _is_annotation(e)))
        else:
            result.append(())
    return tuple(result)


def _is_annotation(value: Any) -> bool:
    return isinstance(value, Annotation) or bool(designators_of(type(value)))


def _find_designated(
    annotations: Iterable[Any], designator: Designator
) -> Optional[Any]:
    found = None
    for annotation in annotations:
        if designator in designators_of(type(annotation)):
            if found is not None:
                raise AmbiguousMetadata(
                    f"Found multiple {designator.value} annotations: "
                    f"@{type_name(type(found))} and @{type_name(type(annotation))}",
                    existing=found,
                    conflicting=annotation,
                    designator=designator,
                )
            found = annotation
    return found


def find_qualifier(annotations: Iterable[Any]) -> Optional[Any]:
    """Return the single qualifier annotation in *annotations*, if any.

    Args:
        annotations: The annotations of a member or parameter, in order.

    Returns:
        The qualifier annotation, or ``None`` when there is none.

    Raises:
        AmbiguousMetadata: If two qualifier annotations are present.

    Examples:
        >>> find_qualifier([Inject(), Named("cache")])
        Named(value='cache')
        >>> find_qualifier([Inject()]) is None
        True
    """
    return _find_designated(annotations, Designator.QUALIFIER)


def find_scope(annotations: Iterable[Any]) -> Optional[Any]:
    """Return the single scope annotation in *annotations*, if any.

    Raises:
        AmbiguousMetadata: If two scope annotations are present.
    """
    return _find_designated(annotations, Designator.SCOPE)


def has_annotation(annotations: Iterable[Any], annotation_type: type) -> bool:
    """Return whether an annotation of exactly *annotation_type* is present.

    Subclasses and designator relations do not count.

    Examples:
        >>> has_annotation([Named("a")], Named)
        True
        >>> has_annotation([Named("a")], Annotation)
        False
    """
    return any(type(annotation) is annotation_type for annotation in annotations)
