"""Generate the class properties from the properties and the data shape fields."""
from typing import List, Optional, Tuple

from icontract import ensure

from twx_ts_codegen.common import Error
from twx_ts_codegen.model import (
    DataShapeField,
    FieldDefinition,
    PropertyDefinition,
    RuntimePermission,
)
from twx_ts_codegen.typescript import common as ts_common, permissions, tree

#: Settings of a remote binding which are carried over to the ``remote`` decorator;
#: all the other settings are ignored
REMOTE_BINDING_KEYS = (
    "pushType",
    "pushThreshold",
    "startType",
    "foldType",
    "cacheTime",
    "timeout",
)


class _FieldBase:
    """Structure the parts common to all the fields."""

    def __init__(
        self,
        decorators: List[tree.Decorator],
        initializer: Optional[tree.Expression],
        type_node: tree.TypeNode,
        comment: Optional[tree.DocComment],
    ) -> None:
        """Initialize with the given values."""
        self.decorators = decorators
        self.initializer = initializer
        self.type_node = type_node
        self.comment = comment


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _generate_field_base(
    field: FieldDefinition, separator: str
) -> Tuple[Optional[_FieldBase], Optional[Error]]:
    """Generate the constraints, the initializer, the type and the documentation."""
    aspects = field.aspects
    decorators = []  # type: List[tree.Decorator]

    if aspects.minimum_value is not None:
        decorators.append(
            ts_common.decorator(
                "minimumValue", tree.NumericLiteral(aspects.minimum_value)
            )
        )

    if aspects.maximum_value is not None:
        decorators.append(
            ts_common.decorator(
                "maximumValue", tree.NumericLiteral(aspects.maximum_value)
            )
        )

    if aspects.units is not None:
        decorators.append(
            ts_common.decorator("unit", tree.StringLiteral(aspects.units))
        )

    initializer = None  # type: Optional[tree.Expression]
    if aspects.default_value is not None:
        initializer, error = ts_common.literal(aspects.default_value)
        if error is not None:
            return None, Error(
                None,
                f"Failed to convert the default value of the field {field.name!r}",
                [error],
            )

    return (
        _FieldBase(
            decorators=decorators,
            initializer=initializer,
            type_node=ts_common.type_node(field.base_type, aspects, separator),
            comment=ts_common.optional_doc_comment(field.description),
        ),
        None,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _generate_remote_decorator(
    prop: PropertyDefinition,
) -> Tuple[Optional[tree.Decorator], Optional[Error]]:
    """Generate the ``remote`` decorator of a property bound to a remote source."""
    assert prop.remote_binding is not None

    assignments = []  # type: List[tree.PropertyAssignment]
    for key, value in prop.remote_binding.options.items():
        if key not in REMOTE_BINDING_KEYS:
            continue

        value_literal, error = ts_common.literal(value)
        if error is not None:
            return None, Error(
                None,
                f"Failed to convert the setting {key!r} of the remote binding "
                f"of the property {prop.name!r}",
                [error],
            )

        assert value_literal is not None
        assignments.append(tree.PropertyAssignment(name=key, value=value_literal))

    source_name = (
        prop.remote_binding.source_name
        if prop.remote_binding.source_name is not None
        else prop.name
    )

    return (
        ts_common.decorator(
            "remote",
            tree.StringLiteral(source_name),
            tree.ObjectLiteral(properties=assignments),
        ),
        None,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def generate_property(
    prop: PropertyDefinition,
    permission: Optional[RuntimePermission],
    separator: str = "_",
) -> Tuple[Optional[tree.PropertyDeclaration], Optional[Error]]:
    """
    Generate the class property of the entity property ``prop``.

    The ``permission`` is the runtime permission of the property, if any is
    attached directly to it.
    """
    base, error = _generate_field_base(prop, separator)
    if error is not None:
        return None, error

    assert base is not None
    aspects = prop.aspects
    decorators = base.decorators

    if aspects.is_persistent:
        decorators.append(ts_common.decorator("persistent"))

    if aspects.is_logged:
        decorators.append(ts_common.decorator("logged"))

    if aspects.data_change_type is not None:
        args = [
            tree.StringLiteral(aspects.data_change_type)
        ]  # type: List[tree.Expression]
        if aspects.data_change_threshold is not None:
            args.append(tree.NumericLiteral(aspects.data_change_threshold))

        decorators.append(ts_common.decorator("dataChangeType", *args))

    if aspects.is_remote and prop.remote_binding is not None:
        remote_decorator, error = _generate_remote_decorator(prop)
        if error is not None:
            return None, error

        assert remote_decorator is not None
        decorators.append(remote_decorator)

    if prop.local_binding is not None:
        decorators.append(
            ts_common.decorator(
                "local",
                tree.StringLiteral(prop.local_binding.source_thing_name),
                tree.StringLiteral(prop.local_binding.source_name),
            )
        )

    if permission is not None:
        decorators.extend(
            permissions.runtime_permission_decorators(prop.name, permission)
        )

    return (
        tree.PropertyDeclaration(
            name=prop.name,
            type_node=base.type_node,
            decorators=decorators,
            is_readonly=aspects.is_read_only,
            is_definite=base.initializer is None,
            initializer=base.initializer,
            comment=base.comment,
        ),
        None,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def generate_data_shape_field(
    field: DataShapeField, separator: str = "_"
) -> Tuple[Optional[tree.PropertyDeclaration], Optional[Error]]:
    """Generate the class property of a data shape field."""
    base, error = _generate_field_base(field, separator)
    if error is not None:
        return None, error

    assert base is not None
    decorators = base.decorators

    if field.aspects.is_primary_key:
        decorators.append(ts_common.decorator("primaryKey"))

    return (
        tree.PropertyDeclaration(
            name=field.name,
            type_node=base.type_node,
            decorators=decorators,
            is_definite=base.initializer is None,
            initializer=base.initializer,
            comment=base.comment,
        ),
        None,
    )
