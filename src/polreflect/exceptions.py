"""Custom exceptions for the polreflect introspection layer."""

from typing import Any, Optional, Sequence


class AccessViolation(Exception):
    """Raised when a member's visibility forbids reflective injection.

    Private and protected members are never made accessible.

    Args:
        message: Description of the violation.
        member: The offending member handle.

    Examples:
        >>> raise AccessViolation("Service.__secret() must be public or package-protected")
        Traceback (most recent call last):
            ...
        polreflect.exceptions.AccessViolation: Service.__secret() must be public or package-protected
    """

    def __init__(self, message: str, member: Any = None) -> None:
        super().__init__(message)
        self.member = member


class AmbiguousMetadata(Exception):
    """Raised when an annotation set holds two annotations of the same role.

    Args:
        message: Description naming both annotation types.
        existing: The annotation seen first.
        conflicting: The annotation seen second.
        designator: The role both annotations claim.
    """

    def __init__(
        self,
        message: str,
        existing: Any = None,
        conflicting: Any = None,
        designator: Any = None,
    ) -> None:
        super().__init__(message)
        self.existing = existing
        self.conflicting = conflicting
        self.designator = designator


class InvocationFailure(RuntimeError):
    """Raised when a member cannot be invoked for infrastructure reasons.

    The original failure is always available as ``__cause__``.

    Args:
        message: Description naming the member and the arguments passed.
        member: The member that was invoked.
        target: The receiver, or ``None`` for constructors and static calls.
        arguments: The literal arguments supplied.
    """

    def __init__(
        self,
        message: str,
        member: Any = None,
        target: Any = None,
        arguments: Optional[Sequence[Any]] = None,
    ) -> None:
        super().__init__(message)
        self.member = member
        self.target = target
        self.arguments = tuple(arguments or ())


class CheckedError(Exception):
    """Base class for application failures expected to be handled by callers.

    Raised out of an invoked member, these are wrapped in
    :class:`InvocationFailure` instead of propagating as-is.
    """


class ReflectionError(Exception):
    """Base class for failures raised by the reflective call itself."""


class IllegalAccessError(ReflectionError):
    """Raised when a non-public member is called without an access override.

    Examples:
        >>> raise IllegalAccessError("method Repo._load(self) is not accessible")
        Traceback (most recent call last):
            ...
        polreflect.exceptions.IllegalAccessError: method Repo._load(self) is not accessible
    """


class InstantiationError(ReflectionError):
    """Raised when a constructor belongs to a class that cannot be instantiated."""


class InvocationTargetError(ReflectionError):
    """Wraps an exception raised by the invoked member itself.

    The wrapped exception is also chained as ``__cause__``.

    Args:
        target_exception: The exception the callee raised.
    """

    def __init__(self, target_exception: BaseException) -> None:
        super().__init__(f"{type(target_exception).__name__}: {target_exception}")
        self.target_exception = target_exception
