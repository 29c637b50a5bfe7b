"""Reflective handles to injectable constructors and methods."""

import inspect
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from polreflect.annotations import annotations_of, parameter_annotations
from polreflect.exceptions import (
    IllegalAccessError,
    InstantiationError,
    InvocationTargetError,
)
from polreflect.visibility import Visibility, declared_visibility


class MemberKind(Enum):
    """What a :class:`Member` refers to."""

    CONSTRUCTOR = "constructor"
    METHOD = "method"
    STATIC_METHOD = "static method"
    CLASS_METHOD = "class method"
    FUNCTION = "function"


class Member:
    """A handle to a constructor or method eligible for injection.

    Non-public members refuse to be called until their access override flag
    is set, usually by :func:`~polreflect.visibility.validate_visibility`.
    Failures raised by the callee are reported as
    :class:`~polreflect.exceptions.InvocationTargetError`.

    Use the :meth:`constructor`, :meth:`method` and :meth:`of_function`
    factories rather than the initializer.

    Examples:
        >>> class Greeter:
        ...     def greet(self, name):
        ...         return f"hello {name}"
        >>> member = Member.method(Greeter, "greet")
        >>> member.invoke(Greeter(), "ada")
        'hello ada'
    """

    def __init__(
        self,
        kind: MemberKind,
        function: Callable[..., Any],
        owner: Optional[type] = None,
    ) -> None:
        self.kind = kind
        self.function = function
        self.owner = owner
        self.name: str = getattr(function, "__name__", repr(function))
        self._accessible = False

    @classmethod
    def constructor(cls, klass: type) -> "Member":
        """Return the constructor handle of *klass*."""
        if not inspect.isclass(klass):
            raise TypeError(f"Expected a class, got {type(klass).__name__}")
        return cls(MemberKind.CONSTRUCTOR, klass, owner=klass)

    @classmethod
    def method(cls, owner: type, name: str) -> "Member":
        """Return the handle of the method *name* declared on *owner*.

        The lookup is static, so ``staticmethod`` and ``classmethod``
        wrappers are recognised. Name-mangled methods are looked up by their
        mangled name (``_Owner__name``).

        Raises:
            AttributeError: If *owner* has no attribute *name*.
            TypeError: If the attribute is not callable.
        """
        try:
            raw = inspect.getattr_static(owner, name)
        except AttributeError:
            raise AttributeError(
                f"{owner.__qualname__} has no method {name!r}"
            ) from None

        if isinstance(raw, staticmethod):
            return cls(MemberKind.STATIC_METHOD, raw.__func__, owner=owner)
        if isinstance(raw, classmethod):
            return cls(MemberKind.CLASS_METHOD, raw.__func__, owner=owner)
        if not callable(raw):
            raise TypeError(
                f"{owner.__qualname__}.{name} is not callable, "
                f"got {type(raw).__name__}"
            )
        return cls(MemberKind.METHOD, raw, owner=owner)

    @classmethod
    def of_function(cls, func: Callable[..., Any]) -> "Member":
        """Return a handle for a plain function, such as a provider."""
        if not callable(func):
            raise TypeError(f"Expected a callable, got {type(func).__name__}")
        return cls(MemberKind.FUNCTION, func)

    @property
    def visibility(self) -> Visibility:
        """The declared visibility, falling back to naming conventions."""
        if self.kind is MemberKind.CONSTRUCTOR:
            for source in (self._initializer(), self.owner):
                declared = declared_visibility(source) if source is not None else None
                if declared is not None:
                    return declared
            return Visibility.infer(self.name)
        declared = declared_visibility(self.function)
        if declared is not None:
            return declared
        return Visibility.infer(self.name)

    @property
    def accessible(self) -> bool:
        """Whether the member may be called right now."""
        return self._accessible or self.visibility is Visibility.PUBLIC

    def set_accessible(self, flag: bool) -> None:
        """Set or clear the access override flag."""
        self._accessible = bool(flag)

    @property
    def annotations(self) -> Tuple[Any, ...]:
        """Annotations attached to the member, in declaration order.

        For constructors these are the annotations on the ``__init__`` the
        class runs, which may be inherited from a base class.
        """
        if self.kind is MemberKind.CONSTRUCTOR:
            return annotations_of(self._initializer())
        return annotations_of(self.function)

    @property
    def parameter_annotations(self) -> Tuple[Tuple[Any, ...], ...]:
        """Per-parameter annotations recovered from ``Annotated`` hints."""
        if self.kind is MemberKind.CONSTRUCTOR:
            init = self._initializer()
            if init is None:
                return ()
            return parameter_annotations(init, skip_receiver=True)
        bound = self.kind in (MemberKind.METHOD, MemberKind.CLASS_METHOD)
        return parameter_annotations(self.function, skip_receiver=bound)

    def _initializer(self) -> Optional[Callable[..., Any]]:
        # The __init__ the class runs; None when it comes from object or C code.
        init = getattr(self.owner, "__init__", None)
        return init if inspect.isfunction(init) else None

    @property
    def signature(self) -> Optional[inspect.Signature]:
        try:
            return inspect.signature(self.function)
        except (ValueError, TypeError):
            return None

    def invoke(self, target: Any, *arguments: Any) -> Any:
        """Call the method on *target* with *arguments*.

        *target* is ignored for static methods, class methods and functions.

        Raises:
            IllegalAccessError: If the member is not accessible.
            InvocationTargetError: If the method itself raised.
            TypeError: If *target* is not an instance of the owner, or the
                arguments do not fit the signature.
        """
        if self.kind is MemberKind.CONSTRUCTOR:
            raise TypeError(f"{self} is a constructor, use new_instance()")
        self._check_access()

        if self.kind is MemberKind.METHOD:
            if not isinstance(target, self.owner):
                raise TypeError(
                    f"{target!r} is not an instance of {self.owner.__qualname__}"
                )
            call_args: Tuple[Any, ...] = (target,) + arguments
        elif self.kind is MemberKind.CLASS_METHOD:
            call_args = (self.owner,) + arguments
        else:
            call_args = arguments

        self._check_arguments(call_args)
        return self._call(call_args)

    def new_instance(self, *arguments: Any) -> Any:
        """Create an instance of the owning class.

        Raises:
            IllegalAccessError: If the constructor is not accessible.
            InstantiationError: If the class is abstract.
            InvocationTargetError: If the initializer itself raised.
            TypeError: If the arguments do not fit the signature.
        """
        if self.kind is not MemberKind.CONSTRUCTOR:
            raise TypeError(f"{self} is not a constructor, use invoke()")
        self._check_access()
        if inspect.isabstract(self.owner):
            abstract = ", ".join(sorted(self.owner.__abstractmethods__))
            raise InstantiationError(
                f"Cannot instantiate abstract class {self.owner.__qualname__} "
                f"(abstract methods: {abstract})"
            )
        self._check_arguments(arguments)
        return self._call(arguments)

    def _check_access(self) -> None:
        if not self.accessible:
            raise IllegalAccessError(
                f"{self} is {self.visibility.value} and not accessible"
            )

    def _check_arguments(self, call_args: Tuple[Any, ...]) -> None:
        sig = self.signature
        if sig is None:
            return
        try:
            sig.bind(*call_args)
        except TypeError as e:
            raise TypeError(f"Wrong arguments for {self}: {e}") from e

    def _call(self, call_args: Tuple[Any, ...]) -> Any:
        try:
            return self.function(*call_args)
        except BaseException as e:
            raise InvocationTargetError(e) from e

    def __str__(self) -> str:
        sig = self.signature
        params = str(sig) if sig is not None else "(...)"
        if self.kind is MemberKind.CONSTRUCTOR:
            return f"constructor {_qualified(self.owner)}{params}"
        if self.owner is None:
            return f"{self.kind.value} {_qualified(self.function)}{params}"
        return f"{self.kind.value} {_qualified(self.owner)}.{self.name}{params}"

    def __repr__(self) -> str:
        return f"<Member {self}>"


def _qualified(obj: Any) -> str:
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", repr(obj))
    return f"{module}.{qualname}" if module else qualname
