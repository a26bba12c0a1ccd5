"""Represent the entities in a canonical model independent of the input document."""

from twx_ts_codegen.model import _types, _normalize, _stringify

EntityKind = _types.EntityKind
BaseType = _types.BaseType
STR_TO_BASE_TYPE = _types.STR_TO_BASE_TYPE
PermissionKind = _types.PermissionKind
PrincipalType = _types.PrincipalType
VisibilityType = _types.VisibilityType
FieldAspects = _types.FieldAspects
RemotePropertyBinding = _types.RemotePropertyBinding
LocalPropertyBinding = _types.LocalPropertyBinding
FieldDefinition = _types.FieldDefinition
PropertyDefinition = _types.PropertyDefinition
DataShapeField = _types.DataShapeField
ServiceParameter = _types.ServiceParameter
ResultType = _types.ResultType
RemoteServiceBinding = _types.RemoteServiceBinding
ServiceDefinition = _types.ServiceDefinition
RemoteEventBinding = _types.RemoteEventBinding
EventDefinition = _types.EventDefinition
SubscriptionDefinition = _types.SubscriptionDefinition
PermissionEntry = _types.PermissionEntry
RuntimePermission = _types.RuntimePermission
VisibilityPrincipal = _types.VisibilityPrincipal
ConfigurationTableDefinition = _types.ConfigurationTableDefinition
ConfigurationTableValue = _types.ConfigurationTableValue
EntityAspects = _types.EntityAspects
Entity = _types.Entity
Thing = _types.Thing
ThingTemplate = _types.ThingTemplate
ThingShape = _types.ThingShape
DataShape = _types.DataShape
OtherEntity = _types.OtherEntity
EntityUnion = _types.EntityUnion
EntityWithInstancePermissions = _types.EntityWithInstancePermissions

SCRIPT_HANDLER = _normalize.SCRIPT_HANDLER
normalize = _normalize.normalize

dump = _stringify.dump
