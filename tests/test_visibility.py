"""Tests for visibility declaration and validation."""

import unittest

from polreflect.exceptions import AccessViolation
from polreflect.member import Member
from polreflect.visibility import (
    Visibility,
    declare_visibility,
    declared_visibility,
    validate_visibility,
)


class FakeMember:
    """Records every change to the access override flag."""

    def __init__(self, visibility: Visibility) -> None:
        self.visibility = visibility
        self.accessible = visibility is Visibility.PUBLIC
        self.flag_changes: "list[bool]" = []

    def set_accessible(self, flag: bool) -> None:
        self.flag_changes.append(flag)
        self.accessible = flag

    def __str__(self) -> str:
        return "method fake.Repo.load(self)"


class Repository:
    def find(self) -> str:
        return "found"

    def _load(self) -> str:
        return "loaded"

    def __purge(self) -> str:
        return "purged"

    @declare_visibility(Visibility.PROTECTED)
    def hook(self) -> str:
        return "hooked"

    @declare_visibility(Visibility.PUBLIC)
    def _exported(self) -> str:
        return "exported"


class TestVisibilityInference(unittest.TestCase):
    def test_public_name(self) -> None:
        self.assertIs(Visibility.infer("find"), Visibility.PUBLIC)

    def test_single_underscore_is_package(self) -> None:
        self.assertIs(Visibility.infer("_load"), Visibility.PACKAGE)

    def test_double_underscore_is_private(self) -> None:
        self.assertIs(Visibility.infer("__purge"), Visibility.PRIVATE)

    def test_dunder_is_public(self) -> None:
        self.assertIs(Visibility.infer("__init__"), Visibility.PUBLIC)
        self.assertIs(Visibility.infer("__call__"), Visibility.PUBLIC)


class TestDeclareVisibility(unittest.TestCase):
    def test_declaration_is_recorded(self) -> None:
        self.assertIs(declared_visibility(Repository.hook), Visibility.PROTECTED)

    def test_undeclared_is_none(self) -> None:
        self.assertIsNone(declared_visibility(Repository.find))

    def test_declaration_overrides_name(self) -> None:
        member = Member.method(Repository, "_exported")
        self.assertIs(member.visibility, Visibility.PUBLIC)

    def test_declaration_above_staticmethod(self) -> None:
        class Factory:
            @declare_visibility(Visibility.PROTECTED)
            @staticmethod
            def build() -> str:
                return "built"

        member = Member.method(Factory, "build")
        self.assertIs(member.visibility, Visibility.PROTECTED)
        with self.assertRaises(AccessViolation):
            validate_visibility(member)
        self.assertFalse(member.accessible)

    def test_declaration_above_classmethod(self) -> None:
        class Factory:
            @declare_visibility(Visibility.PRIVATE)
            @classmethod
            def create(cls) -> "Factory":
                return cls()

        member = Member.method(Factory, "create")
        self.assertIs(member.visibility, Visibility.PRIVATE)
        with self.assertRaises(AccessViolation):
            validate_visibility(member)

    def test_declaration_below_staticmethod(self) -> None:
        class Factory:
            @staticmethod
            @declare_visibility(Visibility.PROTECTED)
            def build() -> str:
                return "built"

        self.assertIs(Member.method(Factory, "build").visibility, Visibility.PROTECTED)

    def test_rejects_non_visibility(self) -> None:
        with self.assertRaises(TypeError):
            declare_visibility("public")  # type: ignore[arg-type]


class TestValidateVisibility(unittest.TestCase):
    def test_public_is_noop(self) -> None:
        member = FakeMember(Visibility.PUBLIC)
        validate_visibility(member)
        self.assertEqual(member.flag_changes, [])

    def test_package_gains_access(self) -> None:
        member = FakeMember(Visibility.PACKAGE)
        validate_visibility(member)
        self.assertEqual(member.flag_changes, [True])

    def test_private_is_rejected(self) -> None:
        member = FakeMember(Visibility.PRIVATE)
        with self.assertRaises(AccessViolation) as ctx:
            validate_visibility(member)
        self.assertEqual(
            str(ctx.exception),
            "method fake.Repo.load(self) must be public or package-protected",
        )
        self.assertIs(ctx.exception.member, member)
        self.assertEqual(member.flag_changes, [])

    def test_protected_is_rejected(self) -> None:
        member = FakeMember(Visibility.PROTECTED)
        with self.assertRaises(AccessViolation):
            validate_visibility(member)
        self.assertEqual(member.flag_changes, [])

    def test_revalidation_is_noop(self) -> None:
        member = FakeMember(Visibility.PACKAGE)
        validate_visibility(member)
        validate_visibility(member)
        self.assertEqual(member.flag_changes, [True])

    def test_override_is_logged(self) -> None:
        with self.assertLogs("polreflect.visibility", level="DEBUG") as logs:
            validate_visibility(FakeMember(Visibility.PACKAGE))
        self.assertIn("Overriding access checks", logs.output[0])


class TestValidateRealMembers(unittest.TestCase):
    def test_package_method_becomes_invocable(self) -> None:
        member = Member.method(Repository, "_load")
        self.assertFalse(member.accessible)
        validate_visibility(member)
        self.assertTrue(member.accessible)
        self.assertEqual(member.invoke(Repository()), "loaded")

    def test_public_method_flag_untouched(self) -> None:
        member = Member.method(Repository, "find")
        validate_visibility(member)
        self.assertTrue(member.accessible)
        self.assertFalse(member._accessible)

    def test_name_mangled_method_is_private(self) -> None:
        member = Member.method(Repository, "_Repository__purge")
        self.assertIs(member.visibility, Visibility.PRIVATE)
        with self.assertRaises(AccessViolation):
            validate_visibility(member)
        self.assertFalse(member.accessible)

    def test_declared_protected_method(self) -> None:
        member = Member.method(Repository, "hook")
        with self.assertRaises(AccessViolation):
            validate_visibility(member)
        self.assertFalse(member.accessible)


if __name__ == "__main__":
    unittest.main()
