"""Safe invocation of injectable members.

Failures raised by the invoked code are either propagated unchanged or
wrapped in :class:`~polreflect.exceptions.InvocationFailure`, depending on
:func:`classify`. Failures of the reflective call itself are always wrapped.
"""

import logging
from enum import Enum
from typing import Any, NoReturn, Optional, Sequence, Tuple, Type

from polreflect.exceptions import (
    CheckedError,
    IllegalAccessError,
    InstantiationError,
    InvocationFailure,
    InvocationTargetError,
)
from polreflect.member import Member

logger = logging.getLogger(__name__)

# Callee failures of these types are wrapped rather than propagated.
WRAPPED_ERRORS: Tuple[Type[BaseException], ...] = (CheckedError, OSError)


class Disposition(Enum):
    """What the invoker does with a failure raised by the callee.

    Attributes:
        PROPAGATE: Re-raise the failure unchanged.
        WRAP: Raise an :class:`InvocationFailure` chained to the failure.
    """

    PROPAGATE = "propagate"
    WRAP = "wrap"


def classify(error: BaseException) -> Disposition:
    """Decide whether a failure raised by invoked code propagates as-is.

    Fatal errors (``BaseException`` subclasses outside ``Exception``) always
    propagate. Instances of :data:`WRAPPED_ERRORS` are wrapped. Everything
    else is an application error and propagates.

    Examples:
        >>> classify(ValueError("bad port"))
        <Disposition.PROPAGATE: 'propagate'>
        >>> classify(FileNotFoundError("settings.toml"))
        <Disposition.WRAP: 'wrap'>
        >>> classify(KeyboardInterrupt())
        <Disposition.PROPAGATE: 'propagate'>
    """
    if not isinstance(error, Exception):
        return Disposition.PROPAGATE
    if isinstance(error, WRAPPED_ERRORS):
        return Disposition.WRAP
    return Disposition.PROPAGATE


def try_invoke(method: Member, target: Any, *arguments: Any) -> Any:
    """Invoke *method* on *target*, translating failures.

    Args:
        method: The method handle.
        target: The receiver; ignored for static and class methods.
        *arguments: Positional arguments already resolved by the caller.

    Returns:
        Whatever the method returns.

    Raises:
        InvocationFailure: If the call was refused, or the method raised a
            failure that :func:`classify` wraps. ``__cause__`` holds the
            original failure.
        BaseException: Any failure that :func:`classify` propagates, raised
            unchanged.

    Examples:
        >>> class Counter:
        ...     def add(self, n):
        ...         return n + 1
        >>> try_invoke(Member.method(Counter, "add"), Counter(), 41)
        42
    """
    propagate = False
    try:
        return method.invoke(target, *arguments)
    except IllegalAccessError as e:
        cause: BaseException = e
    except InvocationTargetError as e:
        cause = e.target_exception
        propagate = classify(cause) is Disposition.PROPAGATE
    if propagate:
        # Raised outside the handler so the callee's failure gets no new context.
        raise cause
    _fail(
        f"Unable to invoke {method} on {_safe_repr(target)} with arguments "
        f"{_format_arguments(arguments)}",
        cause,
        method,
        target,
        arguments,
    )


def try_new_instance(constructor: Member, *arguments: Any) -> Any:
    """Create an instance through *constructor*, translating failures.

    Behaves like :func:`try_invoke`; an abstract class is reported as an
    :class:`InvocationFailure` caused by an ``InstantiationError``.
    """
    propagate = False
    try:
        return constructor.new_instance(*arguments)
    except (IllegalAccessError, InstantiationError) as e:
        cause: BaseException = e
    except InvocationTargetError as e:
        cause = e.target_exception
        propagate = classify(cause) is Disposition.PROPAGATE
    if propagate:
        raise cause
    _fail(
        f"Unable to invoke {constructor} with arguments "
        f"{_format_arguments(arguments)}",
        cause,
        constructor,
        None,
        arguments,
    )


def _fail(
    message: str,
    cause: BaseException,
    member: Member,
    target: Optional[Any],
    arguments: Sequence[Any],
) -> NoReturn:
    logger.debug("%s (%s: %s)", message, type(cause).__name__, cause)
    raise InvocationFailure(
        message, member=member, target=target, arguments=arguments
    ) from cause


def _format_arguments(arguments: Sequence[Any]) -> str:
    return "[" + ", ".join(_safe_repr(a) for a in arguments) + "]"


def _safe_repr(value: Any) -> str:
    # A broken __repr__ must not replace the failure being reported.
    try:
        return repr(value)
    except Exception:
        return object.__repr__(value)
