"""Normalize the JSON metadata of an entity into the canonical entity model."""
import math
from typing import (
    Any,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from icontract import ensure

from twx_ts_codegen.common import Error, assert_never, join_location
from twx_ts_codegen.model._types import (
    BaseType,
    ConfigurationTableDefinition,
    ConfigurationTableValue,
    DataShape,
    DataShapeField,
    EntityAspects,
    EntityKind,
    EntityUnion,
    EventDefinition,
    FieldAspects,
    LocalPropertyBinding,
    OtherEntity,
    PermissionEntry,
    PermissionKind,
    PrincipalType,
    PropertyDefinition,
    RemoteEventBinding,
    RemotePropertyBinding,
    RemoteServiceBinding,
    ResultType,
    RuntimePermission,
    ServiceDefinition,
    ServiceParameter,
    STR_TO_BASE_TYPE,
    SubscriptionDefinition,
    Thing,
    ThingShape,
    ThingTemplate,
    VisibilityPrincipal,
    VisibilityType,
)

#: The only handler of service implementations that carries code we understand
SCRIPT_HANDLER = "Script"


# region Loosely-typed accessors


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_name(name: Any, location: str) -> Optional[Error]:
    """Check that the key of a definition is usable as a name of a member."""
    if not isinstance(name, str) or len(name) == 0:
        return Error(location, f"Expected a non-empty name, but got: {name!r}")

    return None


def _flag(raw: Mapping[str, Any], key: str) -> bool:
    """Interpret the value under ``key`` as a flag; the platform also uses strings."""
    value = raw.get(key, False)
    return value is True or (isinstance(value, str) and value.lower() == "true")


def _optional_str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    """Retrieve the string under ``key``, where an empty string stands for absent."""
    value = raw.get(key, None)
    if value is None or value == "":
        return None

    return str(value)


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _mapping(
    raw: Mapping[str, Any], key: str, location: Optional[str]
) -> Tuple[Optional[Mapping[str, Any]], Optional[Error]]:
    """Retrieve the mapping under ``key``, where ``None`` stands for empty."""
    value = raw.get(key, None)
    if value is None:
        return {}, None

    if not isinstance(value, Mapping):
        return None, Error(
            join_location(location, key),
            f"Expected a JSON object, but got {type(value).__name__}: {value!r}",
        )

    return value, None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _list(
    raw: Mapping[str, Any], key: str, location: Optional[str]
) -> Tuple[Optional[Sequence[Any]], Optional[Error]]:
    """Retrieve the list under ``key``, where ``None`` stands for empty."""
    value = raw.get(key, None)
    if value is None:
        return [], None

    if not isinstance(value, list):
        return None, Error(
            join_location(location, key),
            f"Expected a JSON array, but got {type(value).__name__}: {value!r}",
        )

    return value, None


@ensure(lambda result: not (result[0] is not None and result[1] is not None))
def _optional_number(
    raw: Mapping[str, Any], key: str, location: Optional[str]
) -> Tuple[Optional[Union[int, float]], Optional[Error]]:
    """
    Retrieve the number under ``key``.

    Both the result and the error are ``None`` if the number is absent. We
    reject the non-finite numbers since they can not be written as literals.
    """
    value = raw.get(key, None)
    if value is None or value == "":
        return None, None

    number = None  # type: Optional[Union[int, float]]
    if _is_number(value):
        number = value
    elif isinstance(value, str):
        try:
            number = int(value) if value.lstrip("-").isdigit() else float(value)
        except ValueError:
            number = None

    if number is None or (isinstance(number, float) and not math.isfinite(number)):
        return None, Error(
            join_location(location, key),
            f"Expected a finite number, but got: {value!r}",
        )

    return number, None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _base_type(
    raw: Mapping[str, Any], location: Optional[str]
) -> Tuple[Optional[BaseType], Optional[Error]]:
    value = raw.get("baseType", None)
    base_type = STR_TO_BASE_TYPE.get(value, None) if isinstance(value, str) else None

    if base_type is None:
        return None, Error(
            join_location(location, "baseType"), f"Unexpected base type: {value!r}"
        )

    return base_type, None


# endregion

# region Fields


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_aspects(
    raw: Mapping[str, Any], location: Optional[str]
) -> Tuple[Optional[FieldAspects], Optional[Error]]:
    aspects_location = join_location(location, "aspects")
    raw_aspects, error = _mapping(raw, "aspects", location)
    if error is not None:
        return None, error

    assert raw_aspects is not None

    numbers = dict()  # type: MutableMapping[str, Optional[Union[int, float]]]
    errors = []  # type: List[Error]
    for key in ("minimumValue", "maximumValue", "dataChangeThreshold"):
        number, error = _optional_number(raw_aspects, key, aspects_location)
        if error is not None:
            errors.append(error)
            continue

        numbers[key] = number

    if len(errors) > 0:
        return None, Error(location, "Failed to parse the aspects", errors)

    return (
        FieldAspects(
            default_value=raw_aspects.get("defaultValue", None),
            minimum_value=numbers["minimumValue"],
            maximum_value=numbers["maximumValue"],
            units=_optional_str(raw_aspects, "units"),
            is_required=_flag(raw_aspects, "isRequired"),
            is_read_only=_flag(raw_aspects, "isReadOnly"),
            is_persistent=_flag(raw_aspects, "isPersistent"),
            is_logged=_flag(raw_aspects, "isLogged"),
            is_primary_key=_flag(raw_aspects, "isPrimaryKey"),
            is_remote=_flag(raw_aspects, "isRemote"),
            data_change_type=_optional_str(raw_aspects, "dataChangeType"),
            data_change_threshold=numbers["dataChangeThreshold"],
            data_shape=_optional_str(raw_aspects, "dataShape"),
            thing_template=_optional_str(raw_aspects, "thingTemplate"),
            thing_shape=_optional_str(raw_aspects, "thingShape"),
        ),
        None,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_field_base(
    raw: Any, location: str
) -> Tuple[
    Optional[Tuple[BaseType, Optional[str], FieldAspects]], Optional[Error]
]:
    """Parse the base type, the description and the aspects shared by all fields."""
    if not isinstance(raw, Mapping):
        return None, Error(
            location, f"Expected a JSON object, but got {type(raw).__name__}"
        )

    base_type, base_type_error = _base_type(raw, location)
    aspects, aspects_error = _parse_aspects(raw, location)

    errors = [error for error in (base_type_error, aspects_error) if error is not None]
    if len(errors) > 0:
        return None, Error(location, "Failed to parse the field", errors)

    assert base_type is not None
    assert aspects is not None

    return (base_type, _optional_str(raw, "description"), aspects), None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_property_definition(
    name: str,
    raw: Any,
    raw_remote_binding: Any,
    raw_local_binding: Any,
    location: str,
) -> Tuple[Optional[PropertyDefinition], Optional[Error]]:
    base, error = _parse_field_base(raw, location)
    if error is not None:
        return None, error

    assert base is not None
    base_type, description, aspects = base

    remote_binding = None  # type: Optional[RemotePropertyBinding]
    if isinstance(raw_remote_binding, Mapping):
        remote_binding = RemotePropertyBinding(
            source_name=_optional_str(raw_remote_binding, "sourceName"),
            options={
                key: value
                for key, value in raw_remote_binding.items()
                if key != "sourceName"
            },
        )

    local_binding = None  # type: Optional[LocalPropertyBinding]
    if isinstance(raw_local_binding, Mapping):
        source_thing_name = _optional_str(raw_local_binding, "sourceThingName")
        source_name = _optional_str(raw_local_binding, "sourceName")
        if source_thing_name is None or source_name is None:
            return None, Error(
                join_location("propertyBindings", name),
                f"Expected both the sourceThingName and the sourceName "
                f"in the local binding, but got: {dict(raw_local_binding)!r}",
            )

        local_binding = LocalPropertyBinding(
            source_thing_name=source_thing_name, source_name=source_name
        )

    return (
        PropertyDefinition(
            name=name,
            base_type=base_type,
            description=description,
            aspects=aspects,
            remote_binding=remote_binding,
            local_binding=local_binding,
        ),
        None,
    )


# endregion

# region Behavior


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _script_code(
    raw_implementation: Mapping[str, Any], location: str
) -> Tuple[Optional[str], Optional[Error]]:
    """Extract the code from the ``Script`` configuration table of an implementation."""
    configuration_tables = raw_implementation.get("configurationTables", None)
    script = (
        configuration_tables.get(SCRIPT_HANDLER, None)
        if isinstance(configuration_tables, Mapping)
        else None
    )
    rows = script.get("rows", None) if isinstance(script, Mapping) else None

    if (
        not isinstance(rows, list)
        or len(rows) == 0
        or not isinstance(rows[0], Mapping)
        or not isinstance(rows[0].get("code", None), str)
    ):
        return None, Error(
            join_location(location, "configurationTables", SCRIPT_HANDLER),
            "Expected the code in the first row of the script configuration table",
        )

    return rows[0]["code"], None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_service_definition(
    name: str,
    raw: Any,
    raw_implementation: Any,
    raw_remote_binding: Any,
    location: str,
    implementation_location: str,
) -> Tuple[Optional[ServiceDefinition], Optional[Error]]:
    if not isinstance(raw, Mapping):
        return None, Error(
            location, f"Expected a JSON object, but got {type(raw).__name__}"
        )

    errors = []  # type: List[Error]

    code = None  # type: Optional[str]
    if isinstance(raw_implementation, Mapping):
        handler_name = raw_implementation.get("handlerName", None)
        if handler_name != SCRIPT_HANDLER:
            errors.append(
                Error(
                    join_location(implementation_location, "handlerName"),
                    f"Service implementation for the service {name!r} "
                    f"has the handler set to {handler_name!r}. "
                    f"Only {SCRIPT_HANDLER!r} is supported.",
                )
            )
        else:
            code, error = _script_code(raw_implementation, implementation_location)
            if error is not None:
                errors.append(error)

    raw_result_type = raw.get("resultType", None)
    result_type = None  # type: Optional[ResultType]
    if raw_result_type is None:
        result_type = ResultType(base_type=BaseType.NOTHING, aspects=FieldAspects())
    else:
        base, error = _parse_field_base(
            raw_result_type, join_location(location, "resultType")
        )
        if error is not None:
            errors.append(error)
        else:
            assert base is not None
            result_type = ResultType(base_type=base[0], aspects=base[2])

    raw_parameters, error = _mapping(raw, "parameterDefinitions", location)
    parameters = []  # type: List[ServiceParameter]
    if error is not None:
        errors.append(error)
    else:
        assert raw_parameters is not None
        for parameter_name, raw_parameter in raw_parameters.items():
            error = _check_name(
                parameter_name, join_location(location, "parameterDefinitions")
            )
            if error is not None:
                errors.append(error)
                continue

            base, error = _parse_field_base(
                raw_parameter,
                join_location(location, "parameterDefinitions", parameter_name),
            )
            if error is not None:
                errors.append(error)
                continue

            assert base is not None
            parameters.append(
                ServiceParameter(
                    name=parameter_name,
                    base_type=base[0],
                    description=base[1],
                    aspects=base[2],
                )
            )

    raw_aspects, error = _mapping(raw, "aspects", location)
    if error is not None:
        errors.append(error)

    remote_binding = None  # type: Optional[RemoteServiceBinding]
    if isinstance(raw_remote_binding, Mapping):
        timeout, error = _optional_number(
            raw_remote_binding,
            "timeout",
            join_location("remoteServiceBindings", name),
        )
        if error is not None:
            errors.append(error)
        else:
            remote_binding = RemoteServiceBinding(
                source_name=_optional_str(raw_remote_binding, "sourceName"),
                enable_queue=_flag(raw_remote_binding, "enableQueue"),
                timeout=timeout,
            )

    if len(errors) > 0:
        return None, Error(
            location, f"Failed to normalize the service {name!r}", errors
        )

    assert result_type is not None
    assert raw_aspects is not None

    return (
        ServiceDefinition(
            name=name,
            description=_optional_str(raw, "description"),
            result_type=result_type,
            parameters=parameters,
            is_async=_flag(raw_aspects, "isAsync"),
            is_allow_override=_flag(raw, "isAllowOverride"),
            # The platform spells the flag both ways depending on the version.
            is_overridden=_flag(raw, "isOverriden") or _flag(raw, "isOverridden"),
            code=code,
            remote_binding=remote_binding,
        ),
        None,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_subscription_definition(
    name: str, raw: Any, location: str
) -> Tuple[Optional[SubscriptionDefinition], Optional[Error]]:
    if not isinstance(raw, Mapping):
        return None, Error(
            location, f"Expected a JSON object, but got {type(raw).__name__}"
        )

    event_name = _optional_str(raw, "eventName")
    if event_name is None:
        return None, Error(
            join_location(location, "eventName"),
            f"Expected an event name for the subscription {name!r}",
        )

    raw_implementation = raw.get("serviceImplementation", None)
    if not isinstance(raw_implementation, Mapping):
        return None, Error(
            join_location(location, "serviceImplementation"),
            f"Expected the implementation of the subscription {name!r}",
        )

    code, error = _script_code(
        raw_implementation, join_location(location, "serviceImplementation")
    )
    if error is not None:
        return None, error

    assert code is not None

    return (
        SubscriptionDefinition(
            name=name,
            description=_optional_str(raw, "description"),
            event_name=event_name,
            source=_optional_str(raw, "source"),
            source_property=_optional_str(raw, "sourceProperty"),
            enabled=_flag(raw, "enabled"),
            code=code,
        ),
        None,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_event_definition(
    name: str, raw: Any, raw_remote_binding: Any, location: str
) -> Tuple[Optional[EventDefinition], Optional[Error]]:
    if not isinstance(raw, Mapping):
        return None, Error(
            location, f"Expected a JSON object, but got {type(raw).__name__}"
        )

    data_shape = _optional_str(raw, "dataShape")
    if data_shape is None:
        return None, Error(
            join_location(location, "dataShape"),
            f"Expected a data shape for the event {name!r}",
        )

    remote_binding = None  # type: Optional[RemoteEventBinding]
    if isinstance(raw_remote_binding, Mapping):
        source_name = _optional_str(raw_remote_binding, "sourceName")
        remote_binding = RemoteEventBinding(
            source_name=source_name if source_name is not None else name
        )

    return (
        EventDefinition(
            name=name,
            description=_optional_str(raw, "description"),
            data_shape=data_shape,
            remote_binding=remote_binding,
        ),
        None,
    )


# endregion

# region Permissions


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _index_runtime_permissions(
    raw: Mapping[str, Any], key: str
) -> Tuple[Optional[Mapping[str, RuntimePermission]], Optional[Error]]:
    """Index the flat list of runtime permissions under ``key`` by resource name."""
    raw_container, error = _mapping(raw, key, None)
    if error is not None:
        return None, error

    assert raw_container is not None

    raw_permissions, error = _list(raw_container, "permissions", key)
    if error is not None:
        return None, error

    assert raw_permissions is not None

    result = dict()  # type: MutableMapping[str, RuntimePermission]
    errors = []  # type: List[Error]

    for i, raw_permission in enumerate(raw_permissions):
        location = join_location(key, "permissions", str(i))
        if not isinstance(raw_permission, Mapping):
            errors.append(Error(location, "Expected a JSON object"))
            continue

        resource_name = _optional_str(raw_permission, "resourceName")
        if resource_name is None:
            errors.append(
                Error(
                    join_location(location, "resourceName"),
                    "Expected a resource name",
                )
            )
            continue

        entries_by_kind = (
            dict()
        )  # type: MutableMapping[PermissionKind, List[PermissionEntry]]

        for permission_kind in PermissionKind:
            raw_entries, error = _list(raw_permission, permission_kind.value, location)
            if error is not None:
                errors.append(error)
                continue

            assert raw_entries is not None

            entries = []  # type: List[PermissionEntry]
            for j, raw_entry in enumerate(raw_entries):
                entry_location = join_location(
                    location, permission_kind.value, str(j)
                )

                principal_name = (
                    _optional_str(raw_entry, "name")
                    if isinstance(raw_entry, Mapping)
                    else None
                )
                principal_type = (
                    raw_entry.get("type", None)
                    if isinstance(raw_entry, Mapping)
                    else None
                )

                if principal_name is None or principal_type not in (
                    literal.value for literal in PrincipalType
                ):
                    errors.append(
                        Error(
                            entry_location,
                            f"Expected a principal with a name and a type "
                            f"among {[literal.value for literal in PrincipalType]}, "
                            f"but got: {raw_entry!r}",
                        )
                    )
                    continue

                assert isinstance(raw_entry, Mapping)
                entries.append(
                    PermissionEntry(
                        principal=principal_name,
                        principal_type=PrincipalType(principal_type),
                        is_permitted=_flag(raw_entry, "isPermitted"),
                    )
                )

            entries_by_kind[permission_kind] = entries

        if len(entries_by_kind) == len(PermissionKind):
            result[resource_name] = RuntimePermission(
                resource_name=resource_name, entries_by_kind=entries_by_kind
            )

    if len(errors) > 0:
        return None, Error(key, "Failed to index the runtime permissions", errors)

    return result, None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_visibility_permissions(
    raw: Mapping[str, Any], key: str
) -> Tuple[Optional[List[VisibilityPrincipal]], Optional[Error]]:
    raw_container, error = _mapping(raw, key, None)
    if error is not None:
        return None, error

    assert raw_container is not None

    raw_visibilities, error = _list(raw_container, "Visibility", key)
    if error is not None:
        return None, error

    assert raw_visibilities is not None

    result = []  # type: List[VisibilityPrincipal]
    errors = []  # type: List[Error]

    for i, raw_visibility in enumerate(raw_visibilities):
        location = join_location(key, "Visibility", str(i))
        if not isinstance(raw_visibility, Mapping):
            errors.append(Error(location, "Expected a JSON object"))
            continue

        name = _optional_str(raw_visibility, "name")
        visibility_type = raw_visibility.get("type", None)
        if name is None:
            errors.append(Error(location, "Expected a name of the principal"))

        elif visibility_type == VisibilityType.ORGANIZATION.value:
            result.append(
                VisibilityPrincipal(
                    organization=name,
                    unit=None,
                    visibility_type=VisibilityType.ORGANIZATION,
                )
            )

        elif visibility_type == VisibilityType.ORGANIZATIONAL_UNIT.value:
            organization, separator, unit = name.partition(":")
            if separator == "" or organization == "" or unit == "":
                errors.append(
                    Error(
                        join_location(location, "name"),
                        f"Expected an organizational unit "
                        f"as ``organization:unit``, but got: {name!r}",
                    )
                )
                continue

            result.append(
                VisibilityPrincipal(
                    organization=organization,
                    unit=unit,
                    visibility_type=VisibilityType.ORGANIZATIONAL_UNIT,
                )
            )

        else:
            errors.append(
                Error(
                    join_location(location, "type"),
                    f"Invalid visibility type {visibility_type!r}",
                )
            )

    if len(errors) > 0:
        return None, Error(key, "Failed to parse the visibility permissions", errors)

    return result, None


# endregion

# region Configuration tables


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _flatten_configuration_tables(
    raw: Mapping[str, Any]
) -> Tuple[Optional[Mapping[str, ConfigurationTableValue]], Optional[Error]]:
    """
    Keep only the rows of the configuration tables.

    A multi-row table is flattened to the sequence of its rows, a single-row
    table to its only row. A single-row table without any row is left out.
    """
    raw_tables, error = _mapping(raw, "configurationTables", None)
    if error is not None:
        return None, error

    assert raw_tables is not None

    result = dict()  # type: MutableMapping[str, ConfigurationTableValue]
    errors = []  # type: List[Error]

    for name, raw_table in raw_tables.items():
        location = join_location("configurationTables", name)
        rows = raw_table.get("rows", None) if isinstance(raw_table, Mapping) else None

        if not isinstance(rows, list) or not all(
            isinstance(row, Mapping) for row in rows
        ):
            errors.append(
                Error(
                    location,
                    f"Expected the rows of the configuration table {name!r} "
                    f"as a JSON array of objects",
                )
            )
            continue

        assert isinstance(raw_table, Mapping)
        if _flag(raw_table, "isMultiRow"):
            result[name] = rows
        elif len(rows) > 0:
            result[name] = rows[0]

    if len(errors) > 0:
        return None, Error(
            "configurationTables", "Failed to flatten the configuration tables", errors
        )

    return result, None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _parse_configuration_table_definitions(
    raw: Mapping[str, Any]
) -> Tuple[Optional[List[ConfigurationTableDefinition]], Optional[Error]]:
    raw_definitions, error = _mapping(raw, "configurationTableDefinitions", None)
    if error is not None:
        return None, error

    assert raw_definitions is not None

    result = []  # type: List[ConfigurationTableDefinition]
    errors = []  # type: List[Error]

    for name, raw_definition in raw_definitions.items():
        location = join_location("configurationTableDefinitions", name)
        data_shape_name = (
            _optional_str(raw_definition, "dataShapeName")
            if isinstance(raw_definition, Mapping)
            else None
        )
        if data_shape_name is None:
            errors.append(Error(location, "Expected the name of the data shape"))
            continue

        assert isinstance(raw_definition, Mapping)
        result.append(
            ConfigurationTableDefinition(
                name=name,
                description=_optional_str(raw_definition, "description"),
                data_shape_name=data_shape_name,
                is_multi_row=_flag(raw_definition, "isMultiRow"),
            )
        )

    if len(errors) > 0:
        return None, Error(
            "configurationTableDefinitions",
            "Failed to parse the configuration table definitions",
            errors,
        )

    return result, None


# endregion

# region Entities


def _tags(raw: Mapping[str, Any]) -> List[str]:
    """Represent the tags as ``vocabulary:term``; malformed tags are no-ops."""
    raw_tags = raw.get("tags", None)
    if not isinstance(raw_tags, list):
        return []

    return [
        f"{raw_tag.get('vocabulary', '')}:{raw_tag.get('vocabularyTerm', '')}"
        for raw_tag in raw_tags
        if isinstance(raw_tag, Mapping)
    ]


@ensure(lambda result: not (result[0] is not None and result[1] is not None))
def _parse_identifier(
    raw: Mapping[str, Any]
) -> Tuple[Optional[Union[int, float]], Optional[Error]]:
    """Parse the numeric identifier of a thing, if specified."""
    return _optional_number(raw, "identifier", None)


def _implemented_shapes(raw: Mapping[str, Any]) -> List[str]:
    implemented_shapes = raw.get("implementedShapes", None)
    if isinstance(implemented_shapes, Mapping):
        return list(implemented_shapes.keys())

    if isinstance(implemented_shapes, list):
        return [str(shape) for shape in implemented_shapes]

    return []


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def normalize(
    document: Mapping[str, Any], kind: EntityKind
) -> Tuple[Optional[EntityUnion], Optional[Error]]:
    """
    Normalize the JSON ``document`` describing an entity of the given ``kind``.

    The ``document`` is expected as emitted by the metadata endpoint of
    the platform. We are defensive about the missing parts, but report any
    part that we can not interpret.
    """
    if not isinstance(document, Mapping):
        return None, Error(
            None,
            f"Expected the entity as a JSON object, "
            f"but got {type(document).__name__}",
        )

    name = _optional_str(document, "name")
    if name is None:
        return None, Error("name", "Expected the name of the entity")

    errors = []  # type: List[Error]

    # Things and thing templates carry their members in a nested shape.
    definitions_key = (
        "thingShape"
        if kind in (EntityKind.THING, EntityKind.THING_TEMPLATE)
        else None
    )

    definitions_source = document  # type: Optional[Mapping[str, Any]]
    if kind is EntityKind.DATA_SHAPE:
        # Data shapes carry only field definitions which we parse separately.
        definitions_source = None

    elif definitions_key is not None:
        definitions_source, error = _mapping(document, definitions_key, None)
        if error is not None:
            errors.append(error)

    # NOTE: The bindings are kept on the top level of the document regardless of
    # the kind, and are keyed by the member name.
    bindings = dict()  # type: MutableMapping[str, Mapping[str, Any]]
    for key in (
        "remotePropertyBindings",
        "propertyBindings",
        "remoteServiceBindings",
        "remoteEventBindings",
    ):
        binding_map, error = _mapping(document, key, None)
        if error is not None:
            errors.append(error)
        else:
            assert binding_map is not None
            bindings[key] = binding_map

    property_definitions = []  # type: List[PropertyDefinition]
    service_definitions = []  # type: List[ServiceDefinition]
    event_definitions = []  # type: List[EventDefinition]
    subscription_definitions = []  # type: List[SubscriptionDefinition]

    if definitions_source is not None and len(bindings) == 4:
        raw_properties, error = _mapping(
            definitions_source, "propertyDefinitions", definitions_key
        )
        if error is not None:
            errors.append(error)
        else:
            assert raw_properties is not None
            for member_name, raw_property in raw_properties.items():
                error = _check_name(
                    member_name, join_location(definitions_key, "propertyDefinitions")
                )
                if error is not None:
                    errors.append(error)
                    continue

                prop, error = _parse_property_definition(
                    name=member_name,
                    raw=raw_property,
                    raw_remote_binding=bindings["remotePropertyBindings"].get(
                        member_name, None
                    ),
                    raw_local_binding=bindings["propertyBindings"].get(
                        member_name, None
                    ),
                    location=join_location(
                        definitions_key, "propertyDefinitions", member_name
                    ),
                )
                if error is not None:
                    errors.append(error)
                else:
                    assert prop is not None
                    property_definitions.append(prop)

        raw_services, error = _mapping(
            definitions_source, "serviceDefinitions", definitions_key
        )
        raw_implementations, implementations_error = _mapping(
            definitions_source, "serviceImplementations", definitions_key
        )
        if error is not None:
            errors.append(error)
        elif implementations_error is not None:
            errors.append(implementations_error)
        else:
            assert raw_services is not None
            assert raw_implementations is not None
            for member_name, raw_service in raw_services.items():
                error = _check_name(
                    member_name, join_location(definitions_key, "serviceDefinitions")
                )
                if error is not None:
                    errors.append(error)
                    continue

                service, error = _parse_service_definition(
                    name=member_name,
                    raw=raw_service,
                    raw_implementation=raw_implementations.get(member_name, None),
                    raw_remote_binding=bindings["remoteServiceBindings"].get(
                        member_name, None
                    ),
                    location=join_location(
                        definitions_key, "serviceDefinitions", member_name
                    ),
                    implementation_location=join_location(
                        definitions_key, "serviceImplementations", member_name
                    ),
                )
                if error is not None:
                    errors.append(error)
                else:
                    assert service is not None
                    service_definitions.append(service)

        raw_events, error = _mapping(
            definitions_source, "eventDefinitions", definitions_key
        )
        if error is not None:
            errors.append(error)
        else:
            assert raw_events is not None
            for member_name, raw_event in raw_events.items():
                error = _check_name(
                    member_name, join_location(definitions_key, "eventDefinitions")
                )
                if error is not None:
                    errors.append(error)
                    continue

                event, error = _parse_event_definition(
                    name=member_name,
                    raw=raw_event,
                    raw_remote_binding=bindings["remoteEventBindings"].get(
                        member_name, None
                    ),
                    location=join_location(
                        definitions_key, "eventDefinitions", member_name
                    ),
                )
                if error is not None:
                    errors.append(error)
                else:
                    assert event is not None
                    event_definitions.append(event)

        raw_subscriptions, error = _mapping(
            definitions_source, "subscriptions", definitions_key
        )
        if error is not None:
            errors.append(error)
        else:
            assert raw_subscriptions is not None
            for member_name, raw_subscription in raw_subscriptions.items():
                error = _check_name(
                    member_name, join_location(definitions_key, "subscriptions")
                )
                if error is not None:
                    errors.append(error)
                    continue

                subscription, error = _parse_subscription_definition(
                    name=member_name,
                    raw=raw_subscription,
                    location=join_location(
                        definitions_key, "subscriptions", member_name
                    ),
                )
                if error is not None:
                    errors.append(error)
                else:
                    assert subscription is not None
                    subscription_definitions.append(subscription)

    property_names = set(prop.name for prop in property_definitions)
    for service in service_definitions:
        if service.name in property_names:
            errors.append(
                Error(
                    join_location(definitions_key, "serviceDefinitions", service.name),
                    f"The service {service.name!r} clashes with the property "
                    f"of the same name",
                )
            )

    configuration_table_definitions, error = _parse_configuration_table_definitions(
        document
    )
    if error is not None:
        errors.append(error)

    configuration_tables, error = _flatten_configuration_tables(document)
    if error is not None:
        errors.append(error)

    visibility_permissions, error = _parse_visibility_permissions(
        document, "visibilityPermissions"
    )
    if error is not None:
        errors.append(error)

    runtime_permissions, error = _index_runtime_permissions(
        document, "runTimePermissions"
    )
    if error is not None:
        errors.append(error)

    raw_entity_aspects, error = _mapping(document, "aspects", None)
    if error is not None:
        errors.append(error)

    if len(errors) > 0:
        return None, Error(None, f"Failed to normalize the entity {name!r}", errors)

    assert configuration_table_definitions is not None
    assert configuration_tables is not None
    assert visibility_permissions is not None
    assert runtime_permissions is not None
    assert raw_entity_aspects is not None

    common = dict(
        name=name,
        description=_optional_str(document, "description"),
        documentation_content=_optional_str(document, "documentationContent"),
        project_name=_optional_str(document, "projectName"),
        tags=_tags(document),
        aspects=EntityAspects(
            is_editable_extension_object=_flag(
                raw_entity_aspects, "isEditableExtensionObject"
            )
        ),
        property_definitions=property_definitions,
        service_definitions=service_definitions,
        event_definitions=event_definitions,
        subscription_definitions=subscription_definitions,
        configuration_table_definitions=configuration_table_definitions,
        configuration_tables=configuration_tables,
        visibility_permissions=visibility_permissions,
        runtime_permissions=runtime_permissions,
    )  # type: MutableMapping[str, Any]

    entity, error = _dispatch_kind(document=document, kind=kind, common=common)
    if error is not None:
        return None, Error(
            None, f"Failed to normalize the entity {name!r}", [error]
        )

    return entity, None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def _dispatch_kind(
    document: Mapping[str, Any], kind: EntityKind, common: Mapping[str, Any]
) -> Tuple[Optional[EntityUnion], Optional[Error]]:
    """Copy the fields specific to the ``kind`` and construct the entity."""
    if kind is EntityKind.THING:
        thing_template = _optional_str(document, "thingTemplate")
        if thing_template is None:
            return None, Error("thingTemplate", "Expected the thing template")

        identifier, error = _parse_identifier(document)
        if error is not None:
            return None, error

        return (
            Thing(
                enabled=_flag(document, "enabled"),
                identifier=identifier,
                published=_flag(document, "published"),
                value_stream=_optional_str(document, "valueStream"),
                thing_template=thing_template,
                implemented_shapes=_implemented_shapes(document),
                **common,
            ),
            None,
        )

    elif kind is EntityKind.THING_TEMPLATE:
        base_thing_template = _optional_str(document, "baseThingTemplate")
        if base_thing_template is None:
            return None, Error(
                "baseThingTemplate", "Expected the base thing template"
            )

        instance_visibility_permissions, error = _parse_visibility_permissions(
            document, "instanceVisibilityPermissions"
        )
        if error is not None:
            return None, error

        instance_runtime_permissions, error = _index_runtime_permissions(
            document, "instanceRunTimePermissions"
        )
        if error is not None:
            return None, error

        assert instance_visibility_permissions is not None
        assert instance_runtime_permissions is not None

        return (
            ThingTemplate(
                value_stream=_optional_str(document, "valueStream"),
                thing_template=base_thing_template,
                implemented_shapes=_implemented_shapes(document),
                instance_visibility_permissions=instance_visibility_permissions,
                instance_runtime_permissions=instance_runtime_permissions,
                **common,
            ),
            None,
        )

    elif kind is EntityKind.THING_SHAPE:
        instance_runtime_permissions, error = _index_runtime_permissions(
            document, "instanceRunTimePermissions"
        )
        if error is not None:
            return None, error

        assert instance_runtime_permissions is not None

        return (
            ThingShape(
                instance_runtime_permissions=instance_runtime_permissions, **common
            ),
            None,
        )

    elif kind is EntityKind.DATA_SHAPE:
        raw_fields, error = _mapping(document, "fieldDefinitions", None)
        if error is not None:
            return None, error

        assert raw_fields is not None

        field_definitions = []  # type: List[DataShapeField]
        errors = []  # type: List[Error]
        for field_name, raw_field in raw_fields.items():
            error = _check_name(field_name, "fieldDefinitions")
            if error is not None:
                errors.append(error)
                continue

            base, error = _parse_field_base(
                raw_field, join_location("fieldDefinitions", field_name)
            )
            if error is not None:
                errors.append(error)
                continue

            assert base is not None
            field_definitions.append(
                DataShapeField(
                    name=field_name,
                    base_type=base[0],
                    description=base[1],
                    aspects=base[2],
                )
            )

        if len(errors) > 0:
            return None, Error(
                "fieldDefinitions", "Failed to parse the field definitions", errors
            )

        return DataShape(field_definitions=field_definitions, **common), None

    elif kind is EntityKind.OTHER:
        return OtherEntity(**common), None

    else:
        assert_never(kind)


# endregion
