"""Stringify the canonical entity model."""
import collections.abc
import enum
from typing import Any, Union

from twx_ts_codegen import stringify
from twx_ts_codegen.model._types import (
    ConfigurationTableDefinition,
    DataShape,
    DataShapeField,
    EntityAspects,
    EventDefinition,
    FieldAspects,
    LocalPropertyBinding,
    OtherEntity,
    PermissionEntry,
    PropertyDefinition,
    RemoteEventBinding,
    RemotePropertyBinding,
    RemoteServiceBinding,
    ResultType,
    RuntimePermission,
    ServiceDefinition,
    ServiceParameter,
    SubscriptionDefinition,
    Thing,
    ThingShape,
    ThingTemplate,
    VisibilityPrincipal,
)

Dumpable = Union[
    ConfigurationTableDefinition,
    DataShape,
    DataShapeField,
    EntityAspects,
    EventDefinition,
    FieldAspects,
    LocalPropertyBinding,
    OtherEntity,
    PermissionEntry,
    PropertyDefinition,
    RemoteEventBinding,
    RemotePropertyBinding,
    RemoteServiceBinding,
    ResultType,
    RuntimePermission,
    ServiceDefinition,
    ServiceParameter,
    SubscriptionDefinition,
    Thing,
    ThingShape,
    ThingTemplate,
    VisibilityPrincipal,
]

_DUMPABLE_CLASSES = Dumpable.__args__  # type: ignore


def _stringify(that: Any) -> stringify.Stringifiable:
    """
    Convert recursively ``that`` to a stringifiable.

    The model classes are stringified property-by-property in the order in
    which their constructors set the properties. The kind of an entity is
    implied by its class name.
    """
    if isinstance(that, _DUMPABLE_CLASSES):
        return stringify.Entity(
            name=that.__class__.__name__,
            properties=[
                stringify.Property(name, _stringify(value))
                for name, value in vars(that).items()
            ],
        )

    if that is None or isinstance(that, (bool, int, float, str, enum.Enum)):
        return that

    if isinstance(that, collections.abc.Mapping):
        # NOTE: Permission kinds are enums; we need string keys for the dump.
        return {
            (
                f"{key.__class__.__name__}.{key.name}"
                if isinstance(key, enum.Enum)
                else str(key)
            ): _stringify(value)  # type: ignore
            for key, value in that.items()
        }

    if isinstance(that, collections.abc.Sequence):
        return [_stringify(item) for item in that]  # type: ignore

    raise AssertionError(
        f"No stringification could be found for the class {that.__class__}"
    )


def dump(that: Any) -> str:
    """Produce a string representation of the model ``that`` for debugging."""
    return stringify.dump(_stringify(that))
