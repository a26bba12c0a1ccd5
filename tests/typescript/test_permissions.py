# pylint: disable=missing-docstring

import unittest
from typing import List, Mapping, Sequence

from twx_ts_codegen.model import (
    PermissionEntry,
    PermissionKind,
    PrincipalType,
    RuntimePermission,
    VisibilityPrincipal,
    VisibilityType,
)
from twx_ts_codegen.typescript import permissions

import tests.common


def user(name: str, is_permitted: bool) -> PermissionEntry:
    return PermissionEntry(
        principal=name, principal_type=PrincipalType.USER, is_permitted=is_permitted
    )


def group(name: str, is_permitted: bool) -> PermissionEntry:
    return PermissionEntry(
        principal=name, principal_type=PrincipalType.GROUP, is_permitted=is_permitted
    )


def runtime_permission(
    resource_name: str,
    entries_by_kind: Mapping[PermissionKind, Sequence[PermissionEntry]],
) -> RuntimePermission:
    return RuntimePermission(
        resource_name=resource_name,
        entries_by_kind={
            kind: entries_by_kind.get(kind, []) for kind in PermissionKind
        },
    )


def render(
    resource_name: str,
    permission: RuntimePermission,
    explicit_resource_name: bool = False,
    instance: bool = False,
) -> List[str]:
    return [
        tests.common.render_decorator(decorator)
        for decorator in permissions.runtime_permission_decorators(
            resource_name,
            permission,
            explicit_resource_name=explicit_resource_name,
            instance=instance,
        )
    ]


class Test_runtime_permission_decorators(unittest.TestCase):
    def test_grouped_by_kind_and_polarity(self) -> None:
        permission = runtime_permission(
            "temperature",
            {
                PermissionKind.PROPERTY_READ: [
                    group("Operators", True),
                    user("Guest", False),
                    user("Admin", True),
                ],
                PermissionKind.PROPERTY_WRITE: [user("Guest", False)],
            },
        )

        self.assertListEqual(
            [
                "@allow(Permission.PropertyRead, Groups.Operators, Users.Admin)",
                "@deny(Permission.PropertyRead, Users.Guest, "
                "Permission.PropertyWrite, Users.Guest)",
            ],
            render("temperature", permission),
        )

    def test_kinds_follow_the_fixed_order(self) -> None:
        permission = runtime_permission(
            "x",
            {
                PermissionKind.EVENT_SUBSCRIBE: [user("A", True)],
                PermissionKind.SERVICE_INVOKE: [user("B", True)],
            },
        )

        self.assertListEqual(
            [
                "@allow(Permission.ServiceInvoke, Users.B, "
                "Permission.EventSubscribe, Users.A)"
            ],
            render("x", permission),
        )

    def test_polarity_without_principals_is_suppressed(self) -> None:
        permission = runtime_permission(
            "x", {PermissionKind.PROPERTY_READ: [user("A", True)]}
        )
        self.assertListEqual(
            ["@allow(Permission.PropertyRead, Users.A)"], render("x", permission)
        )

    def test_empty_permission_gives_nothing(self) -> None:
        permission = runtime_permission("x", {})
        self.assertListEqual([], render("x", permission))
        self.assertListEqual(
            [], render("x", permission, explicit_resource_name=True)
        )

    def test_explicit_resource_name(self) -> None:
        permission = runtime_permission(
            "Overheated", {PermissionKind.EVENT_SUBSCRIBE: [user("Guest", False)]}
        )
        self.assertListEqual(
            ['@deny("Overheated", Permission.EventSubscribe, Users.Guest)'],
            render("Overheated", permission, explicit_resource_name=True),
        )

    def test_wildcard_is_never_explicit(self) -> None:
        permission = runtime_permission(
            "*", {PermissionKind.PROPERTY_READ: [group("Admins", True)]}
        )
        self.assertListEqual(
            ["@allow(Permission.PropertyRead, Groups.Admins)"],
            render("*", permission, explicit_resource_name=True),
        )

    def test_instance(self) -> None:
        permission = runtime_permission(
            "x",
            {PermissionKind.PROPERTY_READ: [user("A", True), user("B", False)]},
        )
        self.assertListEqual(
            [
                "@allowInstance(Permission.PropertyRead, Users.A)",
                "@denyInstance(Permission.PropertyRead, Users.B)",
            ],
            render("x", permission, instance=True),
        )


class Test_visibility_decorator(unittest.TestCase):
    def test_organization_and_unit(self) -> None:
        principals = [
            VisibilityPrincipal(
                organization="Demo",
                unit=None,
                visibility_type=VisibilityType.ORGANIZATION,
            ),
            VisibilityPrincipal(
                organization="Demo",
                unit="Operators",
                visibility_type=VisibilityType.ORGANIZATIONAL_UNIT,
            ),
        ]

        self.assertEqual(
            '@visible(Organizations.Demo, Unit(Organizations.Demo, "Operators"))',
            tests.common.render_decorator(
                permissions.visibility_decorator(principals)
            ),
        )
        self.assertEqual(
            "visibleInstance",
            permissions.visibility_decorator(principals, instance=True).name,
        )


if __name__ == "__main__":
    unittest.main()
