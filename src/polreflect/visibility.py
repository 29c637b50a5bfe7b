"""Declared accessibility of injectable members."""

import logging
from enum import Enum
from typing import Any, Callable, TypeVar

from polreflect.exceptions import AccessViolation

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

VISIBILITY_ATTR = "__polreflect_visibility__"


class Visibility(Enum):
    """Defines the declared accessibility of a member.

    Attributes:
        PUBLIC: Callable from anywhere.
        PACKAGE: Internal to its module, but eligible for injection.
        PROTECTED: Reserved for subclasses, never injected.
        PRIVATE: Reserved for the owning class, never injected.

    Examples:
        >>> Visibility.PACKAGE
        <Visibility.PACKAGE: 'package'>
        >>> Visibility.infer("_load")
        <Visibility.PACKAGE: 'package'>
    """

    PUBLIC = "public"
    PACKAGE = "package"
    PROTECTED = "protected"
    PRIVATE = "private"

    @classmethod
    def infer(cls, name: str) -> "Visibility":
        """Derive a visibility from Python naming conventions."""
        if name.startswith("__") and name.endswith("__"):
            return cls.PUBLIC
        if name.startswith("__"):
            return cls.PRIVATE
        if name.startswith("_"):
            return cls.PACKAGE
        return cls.PUBLIC


def declare_visibility(level: Visibility) -> Callable[[F], F]:
    """Declare the visibility of a function or class explicitly.

    The declaration overrides the visibility inferred from the name, and is
    the only way to mark a member ``PROTECTED``.

    Args:
        level: The visibility to declare.

    Returns:
        A decorator that records *level* and returns its target unmodified.

    Examples:
        >>> @declare_visibility(Visibility.PROTECTED)
        ... def build():
        ...     return 1
        >>> declared_visibility(build)
        <Visibility.PROTECTED: 'protected'>
    """
    if not isinstance(level, Visibility):
        raise TypeError(f"level must be a Visibility, got {type(level).__name__}")

    def decorator(inner: F) -> F:
        setattr(_unwrap_descriptor(inner), VISIBILITY_ATTR, level)
        return inner

    return decorator


def declared_visibility(obj: Any) -> "Visibility | None":
    """Return the visibility declared directly on *obj*, if any."""
    obj = _unwrap_descriptor(obj)
    return vars(obj).get(VISIBILITY_ATTR) if hasattr(obj, "__dict__") else None


def _unwrap_descriptor(obj: Any) -> Any:
    # staticmethod and classmethod wrappers record metadata on the function.
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    return obj


def validate_visibility(member: Any) -> None:
    """Ensure *member* may be invoked by the resolver.

    Public members are left alone. Package-visible members get their access
    override flag set so later invocation succeeds. Validating twice is a
    no-op the second time.

    Args:
        member: A :class:`~polreflect.member.Member`.

    Raises:
        AccessViolation: If the member is private or protected.
    """
    level = member.visibility
    if level in (Visibility.PRIVATE, Visibility.PROTECTED):
        raise AccessViolation(
            f"{member} must be public or package-protected", member=member
        )
    if level is Visibility.PACKAGE and not member.accessible:
        logger.debug("Overriding access checks for %s", member)
        member.set_accessible(True)
