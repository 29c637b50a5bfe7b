"""polreflect: reflective introspection and safe invocation for dependency injection."""

from polreflect.annotations import (
    Annotation,
    Designator,
    Inject,
    Named,
    Singleton,
    annotated,
    annotations_of,
    find_qualifier,
    find_scope,
    has_annotation,
    parameter_annotations,
    qualifier,
    scope,
)
from polreflect.exceptions import (
    AccessViolation,
    AmbiguousMetadata,
    CheckedError,
    IllegalAccessError,
    InstantiationError,
    InvocationFailure,
    InvocationTargetError,
    ReflectionError,
)
from polreflect.invocation import Disposition, classify, try_invoke, try_new_instance
from polreflect.member import Member, MemberKind
from polreflect.visibility import Visibility, declare_visibility, validate_visibility

__all__ = [
    "Annotation",
    "Designator",
    "Inject",
    "Named",
    "Singleton",
    "annotated",
    "annotations_of",
    "find_qualifier",
    "find_scope",
    "has_annotation",
    "parameter_annotations",
    "qualifier",
    "scope",
    "AccessViolation",
    "AmbiguousMetadata",
    "CheckedError",
    "IllegalAccessError",
    "InstantiationError",
    "InvocationFailure",
    "InvocationTargetError",
    "ReflectionError",
    "Disposition",
    "classify",
    "try_invoke",
    "try_new_instance",
    "Member",
    "MemberKind",
    "Visibility",
    "declare_visibility",
    "validate_visibility",
]
