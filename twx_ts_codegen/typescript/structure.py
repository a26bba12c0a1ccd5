"""Assemble the class declaration of an entity."""
from typing import List, Mapping, Optional, Set, Tuple, Union

from icontract import ensure

from twx_ts_codegen.common import Error, Options, assert_never
from twx_ts_codegen.model import (
    DataShape,
    EntityUnion,
    OtherEntity,
    RuntimePermission,
    Thing,
    ThingShape,
    ThingTemplate,
)
from twx_ts_codegen.typescript import (
    common as ts_common,
    fields,
    members,
    naming,
    permissions,
    tree,
)


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _entity_name(
    entity_name: str, separator: str
) -> Tuple[Optional[tree.Name], Optional[Error]]:
    """Refer to the class generated for another entity in an expression."""
    identifier = naming.class_name(entity_name, separator)
    if len(identifier) == 0:
        return None, Error(
            None,
            f"The entity name {entity_name!r} results in an empty class name "
            f"with the separator {separator!r}",
        )

    return tree.Name(identifier), None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _generate_thing_base(
    entity: Union[Thing, ThingTemplate], separator: str
) -> Tuple[Optional[tree.Expression], Optional[Error]]:
    """
    Generate the base class of a thing or a thing template.

    If any shapes are implemented, the base is the composition of the template
    and the shapes.
    """
    base, error = _entity_name(entity.thing_template, separator)
    if error is not None:
        return None, error

    assert base is not None

    if len(entity.implemented_shapes) == 0:
        return base, None

    args = [base]  # type: List[tree.Expression]
    for shape in entity.implemented_shapes:
        shape_name, error = _entity_name(shape, separator)
        if error is not None:
            return None, error

        assert shape_name is not None
        args.append(shape_name)

    return tree.Call(callee=tree.Name("ThingTemplateWithShapes"), args=args), None


def _generate_configuration_table_definitions(
    entity: EntityUnion, separator: str
) -> tree.Decorator:
    """Generate the ``ConfigurationTables`` decorator listing the table schemas."""
    return ts_common.decorator(
        "ConfigurationTables",
        tree.ClassExpression(
            members=[
                tree.PropertyDeclaration(
                    name=definition.name,
                    type_node=tree.TypeReference(
                        "MultiRowTable" if definition.is_multi_row else "Table",
                        [
                            ts_common.entity_reference(
                                definition.data_shape_name, separator
                            )
                        ],
                    ),
                    comment=ts_common.optional_doc_comment(definition.description),
                )
                for definition in entity.configuration_table_definitions
            ]
        ),
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _generate_configuration_tables(
    entity: EntityUnion,
) -> Tuple[Optional[tree.Decorator], Optional[Error]]:
    """Generate the ``config`` decorator with the values of the tables."""
    value, error = ts_common.json_literal(dict(entity.configuration_tables))
    if error is not None:
        return None, Error(
            None, "Failed to convert the values of the configuration tables", [error]
        )

    assert value is not None
    return ts_common.decorator("config", value), None


def _class_level_permissions(
    runtime_permissions: Mapping[str, RuntimePermission],
    excluded: Set[str],
    instance: bool,
) -> List[tree.Decorator]:
    """Generate the permission decorators of all the resources not ``excluded``."""
    result = []  # type: List[tree.Decorator]
    for resource_name, permission in runtime_permissions.items():
        if resource_name in excluded:
            continue

        result.extend(
            permissions.runtime_permission_decorators(
                resource_name,
                permission,
                explicit_resource_name=True,
                instance=instance,
            )
        )

    return result


# fmt: off
@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
@ensure(
    lambda entity, options, result:
    result[0] is None
    or result[0].name == naming.class_name(
        entity.name,
        options.entity_name_separator if options is not None else "_"
    )
)
# fmt: on
def generate(
    entity: EntityUnion, options: Optional[Options] = None
) -> Tuple[Optional[tree.ClassDeclaration], Optional[Error]]:
    """
    Generate the class declaration of the ``entity``.

    The permissions of the properties and the services defined on the entity
    are attached to the members. All the other permissions are attached to the
    class with the explicit resource name. Things use the runtime permissions
    for the members, while thing templates and thing shapes use the
    permissions of their instances.
    """
    if options is None:
        options = Options()

    separator = options.entity_name_separator

    errors = []  # type: List[Error]

    class_name = naming.class_name(entity.name, separator)
    if len(class_name) == 0:
        return None, Error(
            None,
            f"The entity name {entity.name!r} results in an empty class name "
            f"with the separator {separator!r}",
        )

    locally_defined_names = set(entity.locally_defined_names())

    decorators = [
        ts_common.decorator("exportName", tree.StringLiteral(entity.name))
    ]  # type: List[tree.Decorator]

    if entity.aspects.is_editable_extension_object:
        decorators.append(ts_common.decorator("editable"))

    extends = None  # type: Optional[tree.Expression]
    class_members = []  # type: List[tree.MemberUnion]

    if isinstance(entity, (Thing, ThingTemplate)):
        if entity.value_stream is not None:
            decorators.append(
                ts_common.decorator(
                    "valueStream", tree.StringLiteral(entity.value_stream)
                )
            )

        extends, error = _generate_thing_base(entity, separator)
        if error is not None:
            errors.append(error)

    if isinstance(entity, ThingTemplate):
        decorators.append(ts_common.decorator("ThingTemplateDefinition"))

        if len(entity.instance_visibility_permissions) > 0:
            decorators.append(
                permissions.visibility_decorator(
                    entity.instance_visibility_permissions, instance=True
                )
            )

    elif isinstance(entity, Thing):
        decorators.append(ts_common.decorator("ThingDefinition"))

        if entity.published:
            decorators.append(ts_common.decorator("published"))

        if entity.identifier is not None:
            decorators.append(
                ts_common.decorator(
                    "identifier", tree.NumericLiteral(entity.identifier)
                )
            )

        decorators.extend(
            _class_level_permissions(
                entity.runtime_permissions,
                excluded=locally_defined_names,
                instance=False,
            )
        )

    elif isinstance(entity, ThingShape):
        extends = tree.Name("ThingShapeBase")

    elif isinstance(entity, DataShape):
        for field in entity.field_definitions:
            declaration, error = fields.generate_data_shape_field(field, separator)
            if error is not None:
                errors.append(error)
            else:
                assert declaration is not None
                class_members.append(declaration)

        extends = tree.Name("DataShapeBase")

    elif isinstance(entity, OtherEntity):
        pass

    else:
        assert_never(entity)

    if isinstance(entity, (ThingShape, ThingTemplate)):
        decorators.extend(
            _class_level_permissions(
                entity.instance_runtime_permissions,
                excluded=locally_defined_names,
                instance=True,
            )
        )

        # The members carry the permissions of the instances, so the permissions
        # of the entity itself always go to the class.
        decorators.extend(
            _class_level_permissions(
                entity.runtime_permissions, excluded=set(), instance=False
            )
        )

    if len(entity.visibility_permissions) > 0:
        decorators.append(
            permissions.visibility_decorator(entity.visibility_permissions)
        )

    if len(entity.configuration_table_definitions) > 0:
        decorators.append(
            _generate_configuration_table_definitions(entity, separator)
        )

    if len(entity.configuration_tables) > 0:
        config_decorator, error = _generate_configuration_tables(entity)
        if error is not None:
            errors.append(error)
        else:
            assert config_decorator is not None
            decorators.append(config_decorator)

    if isinstance(entity, (DataShape, OtherEntity)):
        decorators.extend(
            _class_level_permissions(
                entity.runtime_permissions,
                excluded=locally_defined_names,
                instance=False,
            )
        )

    member_permissions = (
        entity.instance_runtime_permissions
        if isinstance(entity, (ThingShape, ThingTemplate))
        else entity.runtime_permissions
    )  # type: Mapping[str, RuntimePermission]

    for prop in entity.property_definitions:
        property_declaration, error = fields.generate_property(
            prop, member_permissions.get(prop.name, None), separator
        )
        if error is not None:
            errors.append(error)
        else:
            assert property_declaration is not None
            class_members.append(property_declaration)

    for service in entity.service_definitions:
        method_declaration, error = members.generate_service(
            service, member_permissions.get(service.name, None), separator
        )
        if error is not None:
            errors.append(error)
        else:
            assert method_declaration is not None
            class_members.append(method_declaration)

    for event in entity.event_definitions:
        class_members.append(members.generate_event(event, separator))

    for subscription in entity.subscription_definitions:
        method_declaration, error = members.generate_subscription(
            subscription, separator
        )
        if error is not None:
            errors.append(error)
        else:
            assert method_declaration is not None
            class_members.append(method_declaration)

    if len(errors) > 0:
        return None, Error(
            None, f"Failed to compile the entity {entity.name!r}", errors
        )

    return (
        tree.ClassDeclaration(
            name=class_name,
            members=class_members,
            decorators=decorators,
            extends=extends,
            comment=ts_common.optional_doc_comment(entity.description),
        ),
        None,
    )
