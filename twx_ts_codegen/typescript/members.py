"""Generate the class members from the services, the events and the subscriptions."""
from typing import List, Optional, Tuple

from icontract import ensure

from twx_ts_codegen.common import Error
from twx_ts_codegen.model import (
    BaseType,
    EventDefinition,
    FieldAspects,
    RuntimePermission,
    ServiceDefinition,
    SubscriptionDefinition,
)
from twx_ts_codegen.typescript import (
    common as ts_common,
    fragment,
    permissions,
    tree,
)

#: Suffix appended to the event name to guess the data shape of the event data
EVENT_DATA_SHAPE_SUFFIX = "Event"


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _generate_service_parameters(
    service: ServiceDefinition, separator: str
) -> Tuple[Optional[List[tree.Parameter]], Optional[Error]]:
    """
    Generate the single destructured parameter bundling the service parameters.

    The service takes no parameters at all if it defines none.
    """
    if len(service.parameters) == 0:
        return [], None

    elements = []  # type: List[tree.BindingElement]
    signatures = []  # type: List[tree.PropertySignature]

    for parameter in service.parameters:
        initializer = None  # type: Optional[tree.Expression]
        if parameter.aspects.default_value is not None:
            initializer, error = ts_common.literal(parameter.aspects.default_value)
            if error is not None:
                return None, Error(
                    None,
                    f"Failed to convert the default value "
                    f"of the parameter {parameter.name!r}",
                    [error],
                )

        elements.append(
            tree.BindingElement(name=parameter.name, initializer=initializer)
        )
        signatures.append(
            tree.PropertySignature(
                name=parameter.name,
                type_node=ts_common.type_node(
                    parameter.base_type, parameter.aspects, separator
                ),
                is_optional=not parameter.aspects.is_required,
            )
        )

    return (
        [
            tree.Parameter(
                name=tree.ObjectBindingPattern(elements=elements),
                type_node=tree.TypeLiteral(members=signatures),
            )
        ],
        None,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def generate_service(
    service: ServiceDefinition,
    permission: Optional[RuntimePermission],
    separator: str = "_",
) -> Tuple[Optional[tree.MethodDeclaration], Optional[Error]]:
    """
    Generate the method implementing the ``service``.

    A remotely bound service has an empty body. Otherwise, the body is merged
    from the code of the service.
    """
    decorators = []  # type: List[tree.Decorator]

    if not service.is_allow_override:
        decorators.append(ts_common.decorator("final"))

    if service.is_overridden:
        decorators.append(ts_common.decorator("override"))

    body = None  # type: Optional[tree.Block]

    if service.remote_binding is not None:
        options = []  # type: List[tree.PropertyAssignment]
        if service.remote_binding.enable_queue:
            options.append(
                tree.PropertyAssignment(
                    name="enableQueue", value=tree.BooleanLiteral(True)
                )
            )

        if service.remote_binding.timeout is not None:
            options.append(
                tree.PropertyAssignment(
                    name="timeout",
                    value=tree.NumericLiteral(service.remote_binding.timeout),
                )
            )

        source_name = (
            service.remote_binding.source_name
            if service.remote_binding.source_name is not None
            else service.name
        )

        decorators.append(
            ts_common.decorator(
                "remoteService",
                tree.StringLiteral(source_name),
                tree.ObjectLiteral(properties=options),
            )
        )

        body = tree.Block(statements=[])

    else:
        if service.code is None:
            return None, Error(
                None,
                f"The service {service.name!r} has neither an implementation "
                f"nor a remote binding",
            )

        body, error = fragment.generate_body(
            service.code, service.result_type.base_type
        )
        if error is not None:
            return None, Error(
                None,
                f"Failed to merge the code of the service {service.name!r}",
                [error],
            )

    parameters, error = _generate_service_parameters(service, separator)
    if error is not None:
        return None, Error(
            None,
            f"Failed to generate the parameters of the service {service.name!r}",
            [error],
        )

    assert parameters is not None
    assert body is not None

    if permission is not None:
        decorators.extend(
            permissions.runtime_permission_decorators(service.name, permission)
        )

    return (
        tree.MethodDeclaration(
            name=service.name,
            parameters=parameters,
            return_type=ts_common.type_node(
                service.result_type.base_type, service.result_type.aspects, separator
            ),
            body=body,
            decorators=decorators,
            is_async=service.is_async,
            comment=ts_common.optional_doc_comment(service.description),
        ),
        None,
    )


def generate_event(
    event: EventDefinition, separator: str = "_"
) -> tree.PropertyDeclaration:
    """
    Generate the property of the ``event`` typed with its data shape.

    Events are not locally defined members as far as the permissions are
    concerned, so their permissions are always given on the class.
    """
    decorators = []  # type: List[tree.Decorator]

    if event.remote_binding is not None:
        decorators.append(
            ts_common.decorator(
                "remoteEvent", tree.StringLiteral(event.remote_binding.source_name)
            )
        )

    return tree.PropertyDeclaration(
        name=event.name,
        type_node=tree.TypeReference(
            "EVENT", [ts_common.entity_reference(event.data_shape, separator)]
        ),
        decorators=decorators,
        is_definite=True,
        comment=ts_common.optional_doc_comment(event.description),
    )


def _subscription_parameters(
    subscription: SubscriptionDefinition, separator: str
) -> List[tree.Parameter]:
    """
    Generate the fixed parameters of a subscription.

    The data shape of the event data is guessed from the event name.
    """
    # TODO: Resolve the data shape of the event data from the event definition
    #  of the source entity once the entities are compiled together.
    event_data_aspects = FieldAspects(
        data_shape=subscription.event_name + EVENT_DATA_SHAPE_SUFFIX
    )

    string_type = ts_common.type_node(BaseType.STRING, None, separator)

    return [
        tree.Parameter(name="alertName", type_node=string_type),
        tree.Parameter(
            name="eventData",
            type_node=ts_common.type_node(
                BaseType.INFOTABLE, event_data_aspects, separator
            ),
        ),
        tree.Parameter(name="eventName", type_node=string_type),
        tree.Parameter(
            name="eventTime",
            type_node=ts_common.type_node(BaseType.DATETIME, None, separator),
        ),
        tree.Parameter(name="source", type_node=string_type),
        tree.Parameter(name="sourceProperty", type_node=string_type),
    ]


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def generate_subscription(
    subscription: SubscriptionDefinition, separator: str = "_"
) -> Tuple[Optional[tree.MethodDeclaration], Optional[Error]]:
    """
    Generate the method handling the event of the ``subscription``.

    Disabled subscriptions can not be compiled.
    """
    if not subscription.enabled:
        return None, Error(
            None,
            f"The subscription {subscription.name!r} is disabled, "
            f"but disabled subscriptions are not supported",
        )

    source_property = (
        [tree.StringLiteral(subscription.source_property)]
        if subscription.source_property is not None
        else []
    )  # type: List[tree.Expression]

    if subscription.source is not None:
        decorator = ts_common.decorator(
            "subscription",
            tree.StringLiteral(subscription.source),
            tree.StringLiteral(subscription.event_name),
            *source_property,
        )
    else:
        decorator = ts_common.decorator(
            "localSubscription",
            tree.StringLiteral(subscription.event_name),
            *source_property,
        )

    body, error = fragment.generate_body(subscription.code, BaseType.NOTHING)
    if error is not None:
        return None, Error(
            None,
            f"Failed to merge the code of the subscription {subscription.name!r}",
            [error],
        )

    assert body is not None

    return (
        tree.MethodDeclaration(
            name=subscription.name,
            parameters=_subscription_parameters(subscription, separator),
            return_type=tree.KeywordType(tree.Keyword.VOID),
            body=body,
            decorators=[decorator],
            comment=ts_common.optional_doc_comment(subscription.description),
        ),
        None,
    )
