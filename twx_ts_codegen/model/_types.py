"""Provide types of the canonical entity model."""
import abc
import enum
import pathlib
from typing import (
    Sequence,
    Optional,
    Union,
    Mapping,
    Final,
    Any,
)

from icontract import require, invariant, DBC

from twx_ts_codegen.common import (
    assert_union_of_descendants_exhaustive,
    all_unique,
)

_MODULE_NAME = pathlib.Path(__file__).parent.name


class EntityKind(enum.Enum):
    """List the kinds of entities that we know how to compile."""

    THING = "Thing"
    THING_TEMPLATE = "ThingTemplate"
    THING_SHAPE = "ThingShape"
    DATA_SHAPE = "DataShape"
    OTHER = "Other"


class BaseType(enum.Enum):
    """List the base types of the platform."""

    NOTHING = "NOTHING"
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    LONG = "LONG"
    BOOLEAN = "BOOLEAN"
    DATETIME = "DATETIME"
    TIMESPAN = "TIMESPAN"
    INFOTABLE = "INFOTABLE"
    LOCATION = "LOCATION"
    XML = "XML"
    JSON = "JSON"
    QUERY = "QUERY"
    IMAGE = "IMAGE"
    HYPERLINK = "HYPERLINK"
    IMAGELINK = "IMAGELINK"
    PASSWORD = "PASSWORD"
    HTML = "HTML"
    TEXT = "TEXT"
    TAGS = "TAGS"
    SCHEDULE = "SCHEDULE"
    VARIANT = "VARIANT"
    GUID = "GUID"
    BLOB = "BLOB"
    VEC2 = "VEC2"
    VEC3 = "VEC3"
    VEC4 = "VEC4"
    THINGCODE = "THINGCODE"
    PROPERTYNAME = "PROPERTYNAME"
    SERVICENAME = "SERVICENAME"
    EVENTNAME = "EVENTNAME"
    THINGNAME = "THINGNAME"
    THINGSHAPENAME = "THINGSHAPENAME"
    THINGTEMPLATENAME = "THINGTEMPLATENAME"
    DATASHAPENAME = "DATASHAPENAME"
    MASHUPNAME = "MASHUPNAME"
    MENUNAME = "MENUNAME"
    BASETYPENAME = "BASETYPENAME"
    USERNAME = "USERNAME"
    GROUPNAME = "GROUPNAME"
    CATEGORYNAME = "CATEGORYNAME"
    STATEDEFINITIONNAME = "STATEDEFINITIONNAME"
    STYLEDEFINITIONNAME = "STYLEDEFINITIONNAME"
    STYLETHEMENAME = "STYLETHEMENAME"
    MODELTAGVOCABULARYNAME = "MODELTAGVOCABULARYNAME"
    DATATAGVOCABULARYNAME = "DATATAGVOCABULARYNAME"
    NETWORKNAME = "NETWORKNAME"
    MEDIAENTITYNAME = "MEDIAENTITYNAME"
    APPLICATIONKEYNAME = "APPLICATIONKEYNAME"
    LOCALIZATIONTABLENAME = "LOCALIZATIONTABLENAME"
    ORGANIZATIONNAME = "ORGANIZATIONNAME"
    DASHBOARDNAME = "DASHBOARDNAME"
    PERSISTENCEPROVIDERPACKAGENAME = "PERSISTENCEPROVIDERPACKAGENAME"
    PERSISTENCEPROVIDERNAME = "PERSISTENCEPROVIDERNAME"
    PROJECTNAME = "PROJECTNAME"
    NOTIFICATIONCONTENTNAME = "NOTIFICATIONCONTENTNAME"
    NOTIFICATIONDEFINITIONNAME = "NOTIFICATIONDEFINITIONNAME"


STR_TO_BASE_TYPE = {
    literal.value: literal for literal in BaseType
}  # type: Mapping[str, BaseType]


class PermissionKind(enum.Enum):
    """
    List the kinds of runtime permissions.

    The order of the literals is the order in which the permissions are
    considered during the synthesis of the decorators.
    """

    PROPERTY_READ = "PropertyRead"
    PROPERTY_WRITE = "PropertyWrite"
    SERVICE_INVOKE = "ServiceInvoke"
    EVENT_INVOKE = "EventInvoke"
    EVENT_SUBSCRIBE = "EventSubscribe"


class PrincipalType(enum.Enum):
    """List the kinds of principals a runtime permission can be granted to."""

    USER = "User"
    GROUP = "Group"


class VisibilityType(enum.Enum):
    """List the kinds of principals an entity can be made visible to."""

    ORGANIZATION = "Organization"
    ORGANIZATIONAL_UNIT = "OrganizationalUnit"


# region Fields


class FieldAspects:
    """Represent the aspects of a property, a parameter or a data shape field."""

    #: Default value as given in the document; ``None`` if absent
    default_value: Final[Any]

    #: Minimum value of a numeric field, if any
    minimum_value: Final[Optional[Union[int, float]]]

    #: Maximum value of a numeric field, if any
    maximum_value: Final[Optional[Union[int, float]]]

    #: Units of the value, if any
    units: Final[Optional[str]]

    is_required: Final[bool]
    is_read_only: Final[bool]
    is_persistent: Final[bool]
    is_logged: Final[bool]
    is_primary_key: Final[bool]

    #: Set if the value is bound to a remote source
    is_remote: Final[bool]

    #: Kind of the data change detection (*e.g.*, ``VALUE``), if any
    data_change_type: Final[Optional[str]]

    #: Threshold of the data change detection, if any
    data_change_threshold: Final[Optional[Union[int, float]]]

    #: Name of the data shape of an infotable, if any
    data_shape: Final[Optional[str]]

    #: Name of the thing template a thing name refers to, if any
    thing_template: Final[Optional[str]]

    #: Name of the thing shape a thing name refers to, if any
    thing_shape: Final[Optional[str]]

    def __init__(
        self,
        default_value: Any = None,
        minimum_value: Optional[Union[int, float]] = None,
        maximum_value: Optional[Union[int, float]] = None,
        units: Optional[str] = None,
        is_required: bool = False,
        is_read_only: bool = False,
        is_persistent: bool = False,
        is_logged: bool = False,
        is_primary_key: bool = False,
        is_remote: bool = False,
        data_change_type: Optional[str] = None,
        data_change_threshold: Optional[Union[int, float]] = None,
        data_shape: Optional[str] = None,
        thing_template: Optional[str] = None,
        thing_shape: Optional[str] = None,
    ) -> None:
        """Initialize with the given values."""
        self.default_value = default_value
        self.minimum_value = minimum_value
        self.maximum_value = maximum_value
        self.units = units
        self.is_required = is_required
        self.is_read_only = is_read_only
        self.is_persistent = is_persistent
        self.is_logged = is_logged
        self.is_primary_key = is_primary_key
        self.is_remote = is_remote
        self.data_change_type = data_change_type
        self.data_change_threshold = data_change_threshold
        self.data_shape = data_shape
        self.thing_template = thing_template
        self.thing_shape = thing_shape


class RemotePropertyBinding:
    """Represent the binding of a property to a remote source."""

    #: Name of the remote source, if different from the property name
    source_name: Final[Optional[str]]

    #: Remaining binding settings in the order of the input document
    options: Final[Mapping[str, Any]]

    def __init__(self, source_name: Optional[str], options: Mapping[str, Any]) -> None:
        """Initialize with the given values."""
        self.source_name = source_name
        self.options = options


class LocalPropertyBinding:
    """Represent the binding of a property to a property of another thing."""

    source_thing_name: Final[str]
    source_name: Final[str]

    def __init__(self, source_thing_name: str, source_name: str) -> None:
        """Initialize with the given values."""
        self.source_thing_name = source_thing_name
        self.source_name = source_name


class FieldDefinition(DBC):
    """Represent the shape shared by properties, parameters and data shape fields."""

    name: Final[str]
    base_type: Final[BaseType]
    description: Final[Optional[str]]
    aspects: Final[FieldAspects]

    @require(lambda name: len(name) > 0)
    def __init__(
        self,
        name: str,
        base_type: BaseType,
        description: Optional[str],
        aspects: FieldAspects,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.base_type = base_type
        self.description = description
        self.aspects = aspects

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name} at 0x{id(self):x}>"
        )


class PropertyDefinition(FieldDefinition):
    """Represent a property of a thing, a thing template or a thing shape."""

    remote_binding: Final[Optional[RemotePropertyBinding]]
    local_binding: Final[Optional[LocalPropertyBinding]]

    def __init__(
        self,
        name: str,
        base_type: BaseType,
        description: Optional[str],
        aspects: FieldAspects,
        remote_binding: Optional[RemotePropertyBinding] = None,
        local_binding: Optional[LocalPropertyBinding] = None,
    ) -> None:
        """Initialize with the given values."""
        FieldDefinition.__init__(
            self,
            name=name,
            base_type=base_type,
            description=description,
            aspects=aspects,
        )
        self.remote_binding = remote_binding
        self.local_binding = local_binding


class DataShapeField(FieldDefinition):
    """Represent a field of a data shape."""


class ServiceParameter(FieldDefinition):
    """Represent an input parameter of a service."""


class ResultType:
    """Represent the result type of a service."""

    base_type: Final[BaseType]
    aspects: Final[FieldAspects]

    def __init__(self, base_type: BaseType, aspects: FieldAspects) -> None:
        """Initialize with the given values."""
        self.base_type = base_type
        self.aspects = aspects


# endregion

# region Behavior


class RemoteServiceBinding:
    """Represent the binding of a service to a remote implementation."""

    source_name: Final[Optional[str]]
    enable_queue: Final[bool]
    timeout: Final[Optional[Union[int, float]]]

    def __init__(
        self,
        source_name: Optional[str],
        enable_queue: bool,
        timeout: Optional[Union[int, float]],
    ) -> None:
        """Initialize with the given values."""
        self.source_name = source_name
        self.enable_queue = enable_queue
        self.timeout = timeout


class ServiceDefinition:
    """Represent a service of an entity."""

    name: Final[str]
    description: Final[Optional[str]]
    result_type: Final[ResultType]
    parameters: Final[Sequence[ServiceParameter]]
    is_async: Final[bool]
    is_allow_override: Final[bool]
    is_overridden: Final[bool]

    #: Code of the implementation; ``None`` if the service has no implementation
    code: Final[Optional[str]]

    remote_binding: Final[Optional[RemoteServiceBinding]]

    # fmt: off
    @require(
        lambda parameters: all_unique([parameter.name for parameter in parameters]),
        "Parameter names unique"
    )
    # fmt: on
    def __init__(
        self,
        name: str,
        description: Optional[str],
        result_type: ResultType,
        parameters: Sequence[ServiceParameter],
        is_async: bool,
        is_allow_override: bool,
        is_overridden: bool,
        code: Optional[str],
        remote_binding: Optional[RemoteServiceBinding],
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.description = description
        self.result_type = result_type
        self.parameters = parameters
        self.is_async = is_async
        self.is_allow_override = is_allow_override
        self.is_overridden = is_overridden
        self.code = code
        self.remote_binding = remote_binding

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name} at 0x{id(self):x}>"
        )


class RemoteEventBinding:
    """Represent the binding of an event to a remote source."""

    source_name: Final[str]

    def __init__(self, source_name: str) -> None:
        """Initialize with the given values."""
        self.source_name = source_name


class EventDefinition:
    """Represent an event of an entity."""

    name: Final[str]
    description: Final[Optional[str]]

    #: Name of the data shape of the event payload
    data_shape: Final[str]

    remote_binding: Final[Optional[RemoteEventBinding]]

    def __init__(
        self,
        name: str,
        description: Optional[str],
        data_shape: str,
        remote_binding: Optional[RemoteEventBinding],
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.description = description
        self.data_shape = data_shape
        self.remote_binding = remote_binding


class SubscriptionDefinition:
    """Represent a subscription to an event."""

    name: Final[str]
    description: Final[Optional[str]]
    event_name: Final[str]

    #: Entity emitting the event; ``None`` for the events of the entity itself
    source: Final[Optional[str]]

    source_property: Final[Optional[str]]
    enabled: Final[bool]
    code: Final[str]

    def __init__(
        self,
        name: str,
        description: Optional[str],
        event_name: str,
        source: Optional[str],
        source_property: Optional[str],
        enabled: bool,
        code: str,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.description = description
        self.event_name = event_name
        self.source = source
        self.source_property = source_property
        self.enabled = enabled
        self.code = code


# endregion

# region Permissions


class PermissionEntry:
    """Represent a principal which is granted or denied a permission."""

    principal: Final[str]
    principal_type: Final[PrincipalType]
    is_permitted: Final[bool]

    def __init__(
        self, principal: str, principal_type: PrincipalType, is_permitted: bool
    ) -> None:
        """Initialize with the given values."""
        self.principal = principal
        self.principal_type = principal_type
        self.is_permitted = is_permitted


# fmt: off
@invariant(
    lambda self:
    all(kind in self.entries_by_kind for kind in PermissionKind),
    "Entries listed for every permission kind"
)
# fmt: on
class RuntimePermission(DBC):
    """Represent the runtime permissions of a single resource."""

    #: Name of the resource; ``*`` stands for all the resources
    resource_name: Final[str]

    entries_by_kind: Final[Mapping[PermissionKind, Sequence[PermissionEntry]]]

    def __init__(
        self,
        resource_name: str,
        entries_by_kind: Mapping[PermissionKind, Sequence[PermissionEntry]],
    ) -> None:
        """Initialize with the given values."""
        self.resource_name = resource_name
        self.entries_by_kind = entries_by_kind


class VisibilityPrincipal:
    """Represent an organization or an organizational unit an entity is visible to."""

    #: Name of the organization
    organization: Final[str]

    #: Name of the unit within the organization, if the principal is a unit
    unit: Final[Optional[str]]

    visibility_type: Final[VisibilityType]

    # fmt: off
    @require(
        lambda visibility_type, unit:
        (visibility_type is VisibilityType.ORGANIZATIONAL_UNIT) == (unit is not None)
    )
    # fmt: on
    def __init__(
        self,
        organization: str,
        unit: Optional[str],
        visibility_type: VisibilityType,
    ) -> None:
        """Initialize with the given values."""
        self.organization = organization
        self.unit = unit
        self.visibility_type = visibility_type


# endregion

# region Configuration tables


class ConfigurationTableDefinition:
    """Represent the schema of a configuration table."""

    name: Final[str]
    description: Final[Optional[str]]
    data_shape_name: Final[str]
    is_multi_row: Final[bool]

    def __init__(
        self,
        name: str,
        description: Optional[str],
        data_shape_name: str,
        is_multi_row: bool,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.description = description
        self.data_shape_name = data_shape_name
        self.is_multi_row = is_multi_row


#: Flattened value of a configuration table: a row for single-row tables,
#: or the sequence of rows for multi-row tables
ConfigurationTableValue = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]

# endregion

# region Entities


class EntityAspects:
    """Represent the aspects of an entity as a whole."""

    is_editable_extension_object: Final[bool]

    def __init__(self, is_editable_extension_object: bool = False) -> None:
        """Initialize with the given values."""
        self.is_editable_extension_object = is_editable_extension_object


def _locally_defined_names(
    property_definitions: Sequence[PropertyDefinition],
    service_definitions: Sequence[ServiceDefinition],
) -> Sequence[str]:
    return [prop.name for prop in property_definitions] + [
        service.name for service in service_definitions
    ]


class Entity(DBC):
    """
    Represent an entity after the normalization.

    The concrete kinds are listed in :py:data:`EntityUnion`.
    """

    name: Final[str]
    description: Final[Optional[str]]
    documentation_content: Final[Optional[str]]
    project_name: Final[Optional[str]]

    #: Tags as ``vocabulary:term``
    tags: Final[Sequence[str]]

    aspects: Final[EntityAspects]

    property_definitions: Final[Sequence[PropertyDefinition]]
    service_definitions: Final[Sequence[ServiceDefinition]]
    event_definitions: Final[Sequence[EventDefinition]]
    subscription_definitions: Final[Sequence[SubscriptionDefinition]]

    configuration_table_definitions: Final[Sequence[ConfigurationTableDefinition]]

    #: Flattened values of the configuration tables indexed by the table name
    configuration_tables: Final[Mapping[str, ConfigurationTableValue]]

    visibility_permissions: Final[Sequence[VisibilityPrincipal]]

    #: Runtime permissions of the entity indexed by the resource name
    runtime_permissions: Final[Mapping[str, RuntimePermission]]

    # fmt: off
    @require(
        lambda property_definitions, service_definitions:
        all_unique(
            _locally_defined_names(property_definitions, service_definitions)
        ),
        "Properties and services share a single namespace"
    )
    @require(
        lambda runtime_permissions:
        all(
            resource_name == permission.resource_name
            for resource_name, permission in runtime_permissions.items()
        )
    )
    # fmt: on
    def __init__(
        self,
        name: str,
        description: Optional[str],
        documentation_content: Optional[str],
        project_name: Optional[str],
        tags: Sequence[str],
        aspects: EntityAspects,
        property_definitions: Sequence[PropertyDefinition],
        service_definitions: Sequence[ServiceDefinition],
        event_definitions: Sequence[EventDefinition],
        subscription_definitions: Sequence[SubscriptionDefinition],
        configuration_table_definitions: Sequence[ConfigurationTableDefinition],
        configuration_tables: Mapping[str, ConfigurationTableValue],
        visibility_permissions: Sequence[VisibilityPrincipal],
        runtime_permissions: Mapping[str, RuntimePermission],
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.description = description
        self.documentation_content = documentation_content
        self.project_name = project_name
        self.tags = tags
        self.aspects = aspects
        self.property_definitions = property_definitions
        self.service_definitions = service_definitions
        self.event_definitions = event_definitions
        self.subscription_definitions = subscription_definitions
        self.configuration_table_definitions = configuration_table_definitions
        self.configuration_tables = configuration_tables
        self.visibility_permissions = visibility_permissions
        self.runtime_permissions = runtime_permissions

    @property
    @abc.abstractmethod
    def kind(self) -> EntityKind:
        """Tag the entity with its kind."""
        raise NotImplementedError()

    def locally_defined_names(self) -> Sequence[str]:
        """List the names of the properties and services defined on the entity."""
        return _locally_defined_names(
            self.property_definitions, self.service_definitions
        )

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name} at 0x{id(self):x}>"
        )


class Thing(Entity):
    """Represent a thing."""

    enabled: Final[bool]

    #: Numeric identifier of the thing, if any
    identifier: Final[Optional[Union[int, float]]]

    published: Final[bool]
    value_stream: Final[Optional[str]]

    #: Name of the thing template the thing is based on
    thing_template: Final[str]

    implemented_shapes: Final[Sequence[str]]

    def __init__(
        self,
        enabled: bool,
        identifier: Optional[Union[int, float]],
        published: bool,
        value_stream: Optional[str],
        thing_template: str,
        implemented_shapes: Sequence[str],
        **kwargs: Any,
    ) -> None:
        """Initialize with the given values; the common values go in ``kwargs``."""
        Entity.__init__(self, **kwargs)
        self.enabled = enabled
        self.identifier = identifier
        self.published = published
        self.value_stream = value_stream
        self.thing_template = thing_template
        self.implemented_shapes = implemented_shapes

    @property
    def kind(self) -> EntityKind:
        return EntityKind.THING


class ThingTemplate(Entity):
    """Represent a thing template."""

    value_stream: Final[Optional[str]]

    #: Name of the thing template this template derives from
    thing_template: Final[str]

    implemented_shapes: Final[Sequence[str]]

    #: Visibility of the instances of the template
    instance_visibility_permissions: Final[Sequence[VisibilityPrincipal]]

    #: Runtime permissions of the instances indexed by the resource name
    instance_runtime_permissions: Final[Mapping[str, RuntimePermission]]

    def __init__(
        self,
        value_stream: Optional[str],
        thing_template: str,
        implemented_shapes: Sequence[str],
        instance_visibility_permissions: Sequence[VisibilityPrincipal],
        instance_runtime_permissions: Mapping[str, RuntimePermission],
        **kwargs: Any,
    ) -> None:
        """Initialize with the given values; the common values go in ``kwargs``."""
        Entity.__init__(self, **kwargs)
        self.value_stream = value_stream
        self.thing_template = thing_template
        self.implemented_shapes = implemented_shapes
        self.instance_visibility_permissions = instance_visibility_permissions
        self.instance_runtime_permissions = instance_runtime_permissions

    @property
    def kind(self) -> EntityKind:
        return EntityKind.THING_TEMPLATE


class ThingShape(Entity):
    """Represent a thing shape."""

    #: Runtime permissions of the implementing things indexed by the resource name
    instance_runtime_permissions: Final[Mapping[str, RuntimePermission]]

    def __init__(
        self,
        instance_runtime_permissions: Mapping[str, RuntimePermission],
        **kwargs: Any,
    ) -> None:
        """Initialize with the given values; the common values go in ``kwargs``."""
        Entity.__init__(self, **kwargs)
        self.instance_runtime_permissions = instance_runtime_permissions

    @property
    def kind(self) -> EntityKind:
        return EntityKind.THING_SHAPE


# fmt: off
@invariant(
    lambda self:
    len(self.service_definitions) == 0
    and len(self.event_definitions) == 0
    and len(self.subscription_definitions) == 0,
    "Data shapes carry no behavior"
)
# fmt: on
class DataShape(Entity):
    """Represent a data shape, a reusable row schema."""

    field_definitions: Final[Sequence[DataShapeField]]

    def __init__(
        self,
        field_definitions: Sequence[DataShapeField],
        **kwargs: Any,
    ) -> None:
        """Initialize with the given values; the common values go in ``kwargs``."""
        Entity.__init__(self, **kwargs)
        self.field_definitions = field_definitions

    @property
    def kind(self) -> EntityKind:
        return EntityKind.DATA_SHAPE


class OtherEntity(Entity):
    """Represent an entity of any other kind, described only by the common fields."""

    @property
    def kind(self) -> EntityKind:
        return EntityKind.OTHER


EntityUnion = Union[Thing, ThingTemplate, ThingShape, DataShape, OtherEntity]
assert_union_of_descendants_exhaustive(union=EntityUnion, base_class=Entity)

EntityWithInstancePermissions = Union[ThingTemplate, ThingShape]

# endregion
