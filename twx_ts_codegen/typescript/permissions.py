"""Generate the decorators granting visibility and runtime permissions."""
from typing import List, Sequence

import more_itertools

from twx_ts_codegen.common import assert_never
from twx_ts_codegen.model import (
    PermissionEntry,
    PermissionKind,
    RuntimePermission,
    VisibilityPrincipal,
    VisibilityType,
)
from twx_ts_codegen.typescript import common as ts_common, tree

#: Resource name standing for all the resources of an entity
WILDCARD_RESOURCE = "*"


def principal_reference(entry: PermissionEntry) -> tree.PropertyAccess:
    """Refer to the principal as ``Users.<name>`` or ``Groups.<name>``."""
    return tree.PropertyAccess(
        instance=tree.Name(entry.principal_type.value + "s"), name=entry.principal
    )


def permission_kind_reference(kind: PermissionKind) -> tree.PropertyAccess:
    """Refer to the permission kind as ``Permission.<kind>``."""
    return tree.PropertyAccess(instance=tree.Name("Permission"), name=kind.value)


def runtime_permission_decorators(
    resource_name: str,
    permission: RuntimePermission,
    explicit_resource_name: bool = False,
    instance: bool = False,
) -> List[tree.Decorator]:
    """
    Generate the ``allow`` and ``deny`` decorators of the runtime ``permission``.

    The arguments are grouped by the permission kind: each kind with at least
    one principal contributes its tag followed by the principals. If the
    resource name is ``explicit_resource_name`` and not the wildcard, it is
    given as the first argument.

    A decorator is generated only if it has at least one tag and one principal.
    The decorators of ``instance`` permissions are ``allowInstance`` and
    ``denyInstance``, respectively.
    """
    allow_args = []  # type: List[tree.Expression]
    deny_args = []  # type: List[tree.Expression]

    for kind in PermissionKind:
        entries = permission.entries_by_kind[kind]
        if len(entries) == 0:
            continue

        denied, allowed = more_itertools.partition(
            lambda entry: entry.is_permitted, entries
        )

        for target, selected in (
            (allow_args, list(allowed)),
            (deny_args, list(denied)),
        ):
            if len(selected) > 0:
                target.append(permission_kind_reference(kind))
                target.extend(principal_reference(entry) for entry in selected)

    if resource_name != WILDCARD_RESOURCE and explicit_resource_name:
        allow_args.insert(0, tree.StringLiteral(resource_name))
        deny_args.insert(0, tree.StringLiteral(resource_name))

    result = []  # type: List[tree.Decorator]
    if len(allow_args) > 1:
        result.append(
            ts_common.decorator("allowInstance" if instance else "allow", *allow_args)
        )

    if len(deny_args) > 1:
        result.append(
            ts_common.decorator("denyInstance" if instance else "deny", *deny_args)
        )

    return result


def visibility_reference(principal: VisibilityPrincipal) -> tree.Expression:
    """Refer to an organization or to a unit within an organization."""
    organization = tree.PropertyAccess(
        instance=tree.Name("Organizations"), name=principal.organization
    )

    if principal.visibility_type is VisibilityType.ORGANIZATION:
        return organization

    elif principal.visibility_type is VisibilityType.ORGANIZATIONAL_UNIT:
        assert principal.unit is not None
        return tree.Call(
            callee=tree.Name("Unit"),
            args=[organization, tree.StringLiteral(principal.unit)],
        )

    else:
        assert_never(principal.visibility_type)

    raise AssertionError("Should not have gotten here")


def visibility_decorator(
    principals: Sequence[VisibilityPrincipal], instance: bool = False
) -> tree.Decorator:
    """Generate the ``visible`` (or ``visibleInstance``) decorator."""
    return ts_common.decorator(
        "visibleInstance" if instance else "visible",
        *[visibility_reference(principal) for principal in principals],
    )
