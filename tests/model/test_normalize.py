# pylint: disable=missing-docstring

import copy
import unittest
from typing import Any, MutableMapping

from twx_ts_codegen import model
from twx_ts_codegen.common import error_message

import tests.common


class Test_thing(unittest.TestCase):
    def setUp(self) -> None:
        entity = tests.common.normalize_or_raise(
            tests.common.load_document("thing"), model.EntityKind.THING
        )
        assert isinstance(entity, model.Thing)
        self.thing = entity

    def test_pass_through_fields(self) -> None:
        self.assertEqual("Demo.Sensor-1", self.thing.name)
        self.assertEqual("Measure the temperature in the hall.", self.thing.description)
        self.assertIsNone(self.thing.documentation_content)
        self.assertEqual("Demo", self.thing.project_name)
        self.assertListEqual(["Applications:Sensors"], list(self.thing.tags))
        self.assertTrue(self.thing.aspects.is_editable_extension_object)

    def test_thing_specific_fields(self) -> None:
        self.assertTrue(self.thing.enabled)
        self.assertTrue(self.thing.published)
        self.assertEqual(42, self.thing.identifier)
        self.assertEqual("Demo.ValueStream", self.thing.value_stream)
        self.assertEqual("Demo.SensorTemplate", self.thing.thing_template)
        self.assertListEqual(["Demo.Alarmable"], list(self.thing.implemented_shapes))
        self.assertIs(model.EntityKind.THING, self.thing.kind)

    def test_members_are_read_from_the_nested_shape(self) -> None:
        self.assertListEqual(
            ["temperature", "serialNumber", "remoteValue", "mirroredLabel"],
            [prop.name for prop in self.thing.property_definitions],
        )
        self.assertListEqual(
            ["GetTemperature", "Reset", "Reboot"],
            [service.name for service in self.thing.service_definitions],
        )
        self.assertListEqual(
            ["Overheated"], [event.name for event in self.thing.event_definitions]
        )
        self.assertListEqual(
            ["OnOverheated"],
            [
                subscription.name
                for subscription in self.thing.subscription_definitions
            ],
        )

    def test_aspects(self) -> None:
        temperature = self.thing.property_definitions[0]
        self.assertIs(model.BaseType.NUMBER, temperature.base_type)
        self.assertEqual("Last measured temperature.", temperature.description)

        aspects = temperature.aspects
        self.assertEqual(20, aspects.default_value)
        self.assertEqual(-40, aspects.minimum_value)
        self.assertEqual(125, aspects.maximum_value)
        self.assertEqual("C", aspects.units)
        self.assertTrue(aspects.is_persistent)
        self.assertTrue(aspects.is_logged)
        self.assertFalse(aspects.is_read_only)
        self.assertEqual("VALUE", aspects.data_change_type)
        self.assertEqual(0.5, aspects.data_change_threshold)

    def test_property_bindings_are_reattached(self) -> None:
        by_name = {prop.name: prop for prop in self.thing.property_definitions}

        remote_binding = by_name["remoteValue"].remote_binding
        assert remote_binding is not None
        self.assertEqual("plc.value", remote_binding.source_name)
        self.assertEqual("VALUE", remote_binding.options["pushType"])
        self.assertNotIn("sourceName", remote_binding.options)

        local_binding = by_name["mirroredLabel"].local_binding
        assert local_binding is not None
        self.assertEqual("Demo.Label", local_binding.source_thing_name)
        self.assertEqual("label", local_binding.source_name)

        self.assertIsNone(by_name["temperature"].remote_binding)
        self.assertIsNone(by_name["temperature"].local_binding)

    def test_services(self) -> None:
        by_name = {service.name: service for service in self.thing.service_definitions}

        get_temperature = by_name["GetTemperature"]
        self.assertEqual(
            "var result = (function () { return me.temperature; })();",
            get_temperature.code,
        )
        self.assertIs(model.BaseType.NUMBER, get_temperature.result_type.base_type)
        self.assertListEqual(
            ["scale", "precision"],
            [parameter.name for parameter in get_temperature.parameters],
        )
        self.assertTrue(get_temperature.parameters[0].aspects.is_required)
        self.assertEqual(2, get_temperature.parameters[1].aspects.default_value)
        self.assertFalse(get_temperature.is_allow_override)

        reset = by_name["Reset"]
        self.assertTrue(reset.is_async)
        self.assertTrue(reset.is_allow_override)
        self.assertTrue(reset.is_overridden)

        reboot = by_name["Reboot"]
        self.assertIsNone(reboot.code)
        assert reboot.remote_binding is not None
        self.assertEqual("reboot", reboot.remote_binding.source_name)
        self.assertTrue(reboot.remote_binding.enable_queue)
        self.assertEqual(5000, reboot.remote_binding.timeout)

    def test_subscription_without_source_is_local(self) -> None:
        subscription = self.thing.subscription_definitions[0]
        self.assertEqual("Overheated", subscription.event_name)
        self.assertIsNone(subscription.source)
        self.assertIsNone(subscription.source_property)
        self.assertTrue(subscription.enabled)
        self.assertEqual("me.Reset();", subscription.code)

    def test_configuration_tables_are_flattened(self) -> None:
        self.assertDictEqual(
            {
                "Settings": {"interval": 10, "label": "hall"},
                "Limits": [{"lower": 0, "upper": 1}, {"lower": 2, "upper": 3}],
            },
            dict(self.thing.configuration_tables),
        )

        self.assertListEqual(
            [("Settings", "Demo.Settings", False), ("Limits", "Demo.Limit", True)],
            [
                (definition.name, definition.data_shape_name, definition.is_multi_row)
                for definition in self.thing.configuration_table_definitions
            ],
        )

    def test_visibility(self) -> None:
        self.assertListEqual(
            [
                ("Demo", None, model.VisibilityType.ORGANIZATION),
                ("Demo", "Operators", model.VisibilityType.ORGANIZATIONAL_UNIT),
            ],
            [
                (principal.organization, principal.unit, principal.visibility_type)
                for principal in self.thing.visibility_permissions
            ],
        )

    def test_runtime_permissions_are_indexed_by_resource(self) -> None:
        self.assertListEqual(
            ["temperature", "GetTemperature", "*", "Overheated"],
            list(self.thing.runtime_permissions.keys()),
        )

        temperature = self.thing.runtime_permissions["temperature"]
        read = temperature.entries_by_kind[model.PermissionKind.PROPERTY_READ]
        self.assertListEqual(
            [("Operators", model.PrincipalType.GROUP, True)],
            [
                (entry.principal, entry.principal_type, entry.is_permitted)
                for entry in read
            ],
        )
        self.assertEqual(
            0,
            len(temperature.entries_by_kind[model.PermissionKind.SERVICE_INVOKE]),
        )

    def test_locally_defined_names(self) -> None:
        self.assertListEqual(
            [
                "temperature",
                "serialNumber",
                "remoteValue",
                "mirroredLabel",
                "GetTemperature",
                "Reset",
                "Reboot",
            ],
            list(self.thing.locally_defined_names()),
        )

    def test_dump_is_deterministic(self) -> None:
        again = tests.common.normalize_or_raise(
            tests.common.load_document("thing"), model.EntityKind.THING
        )
        self.assertEqual(model.dump(self.thing), model.dump(again))


class Test_other_kinds(unittest.TestCase):
    def test_thing_template(self) -> None:
        entity = tests.common.normalize_or_raise(
            tests.common.load_document("thing_template"),
            model.EntityKind.THING_TEMPLATE,
        )
        assert isinstance(entity, model.ThingTemplate)

        self.assertEqual("GenericThing", entity.thing_template)
        self.assertIsNone(entity.value_stream)
        self.assertListEqual([], list(entity.implemented_shapes))
        self.assertListEqual(
            ["location", "Inherited"], list(entity.instance_runtime_permissions)
        )
        self.assertListEqual(["location"], list(entity.runtime_permissions))
        self.assertEqual(1, len(entity.instance_visibility_permissions))

        location = entity.property_definitions[0]
        self.assertEqual("Demo.Room", location.aspects.thing_template)
        self.assertEqual("Demo.Located", location.aspects.thing_shape)

    def test_thing_shape_reads_members_from_the_top_level(self) -> None:
        entity = tests.common.normalize_or_raise(
            tests.common.load_document("thing_shape"), model.EntityKind.THING_SHAPE
        )
        assert isinstance(entity, model.ThingShape)

        self.assertListEqual(
            ["alarmActive"], [prop.name for prop in entity.property_definitions]
        )
        self.assertIs(False, entity.property_definitions[0].aspects.default_value)

        event = entity.event_definitions[0]
        assert event.remote_binding is not None
        self.assertEqual("AlarmRaised", event.remote_binding.source_name)

    def test_data_shape(self) -> None:
        entity = tests.common.normalize_or_raise(
            tests.common.load_document("data_shape"), model.EntityKind.DATA_SHAPE
        )
        assert isinstance(entity, model.DataShape)

        self.assertListEqual(
            ["timestamp", "value", "details"],
            [field.name for field in entity.field_definitions],
        )
        self.assertTrue(entity.field_definitions[0].aspects.is_primary_key)
        self.assertEqual("Demo.Detail", entity.field_definitions[2].aspects.data_shape)

        self.assertListEqual([], list(entity.property_definitions))
        self.assertListEqual([], list(entity.service_definitions))
        self.assertListEqual([], list(entity.event_definitions))
        self.assertListEqual([], list(entity.subscription_definitions))

    def test_other(self) -> None:
        entity = tests.common.normalize_or_raise(
            {"name": "Demo.Mashup", "description": "A mashup."},
            model.EntityKind.OTHER,
        )
        assert isinstance(entity, model.OtherEntity)
        self.assertEqual("Demo.Mashup", entity.name)


class Test_errors(unittest.TestCase):
    def load_thing(self) -> MutableMapping[str, Any]:
        document = copy.deepcopy(dict(tests.common.load_document("thing")))
        return document

    def test_not_an_object(self) -> None:
        _, error = model.normalize([], model.EntityKind.THING)  # type: ignore
        assert error is not None
        self.assertEqual(
            "Expected the entity as a JSON object, but got list", error.message
        )

    def test_missing_name(self) -> None:
        _, error = model.normalize({"description": "x"}, model.EntityKind.OTHER)
        assert error is not None
        self.assertEqual("Expected the name of the entity", error.message)
        self.assertEqual("name", error.location)

    def test_unsupported_handler(self) -> None:
        document = self.load_thing()
        implementation = document["thingShape"]["serviceImplementations"][
            "GetTemperature"
        ]
        implementation["handlerName"] = "SQLQuery"

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None

        self.assertEqual(
            "Service implementation for the service 'GetTemperature' has "
            "the handler set to 'SQLQuery'. Only 'Script' is supported.",
            tests.common.most_underlying_messages(error),
        )
        self.assertIn("'Demo.Sensor-1'", error_message(error))

    def test_unknown_base_type(self) -> None:
        document = self.load_thing()
        document["thingShape"]["propertyDefinitions"]["temperature"][
            "baseType"
        ] = "QUATERNION"

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Unexpected base type: 'QUATERNION'",
            tests.common.most_underlying_messages(error),
        )

    def test_unknown_visibility_type(self) -> None:
        document = self.load_thing()
        document["visibilityPermissions"]["Visibility"][0]["type"] = "Planet"

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Invalid visibility type 'Planet'",
            tests.common.most_underlying_messages(error),
        )

    def test_malformed_organizational_unit(self) -> None:
        document = self.load_thing()
        document["visibilityPermissions"]["Visibility"][1]["name"] = "NoUnit"

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Expected an organizational unit as ``organization:unit``, "
            "but got: 'NoUnit'",
            tests.common.most_underlying_messages(error),
        )

    def test_unknown_principal_type(self) -> None:
        document = self.load_thing()
        entry = document["runTimePermissions"]["permissions"][0]["PropertyRead"][0]
        entry["type"] = "Robot"

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertIn(
            "Expected a principal", tests.common.most_underlying_messages(error)
        )

    def test_service_clashing_with_property(self) -> None:
        document = self.load_thing()
        services = document["thingShape"]["serviceDefinitions"]
        services["temperature"] = copy.deepcopy(services["Reboot"])
        document["remoteServiceBindings"]["temperature"] = {"sourceName": "x"}

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "The service 'temperature' clashes with the property of the same name",
            tests.common.most_underlying_messages(error),
        )

    def test_missing_thing_template(self) -> None:
        document = self.load_thing()
        del document["thingTemplate"]

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Expected the thing template", tests.common.most_underlying_messages(error)
        )

    def test_malformed_configuration_table(self) -> None:
        document = self.load_thing()
        document["configurationTables"]["Settings"]["rows"] = "not rows"

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Expected the rows of the configuration table 'Settings' "
            "as a JSON array of objects",
            tests.common.most_underlying_messages(error),
        )

    def test_empty_identifier_is_none(self) -> None:
        document = self.load_thing()
        document["identifier"] = ""

        entity = tests.common.normalize_or_raise(document, model.EntityKind.THING)
        assert isinstance(entity, model.Thing)
        self.assertIsNone(entity.identifier)

    def test_invalid_identifier(self) -> None:
        document = self.load_thing()
        document["identifier"] = "forty-two"

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Expected a finite number, but got: 'forty-two'",
            tests.common.most_underlying_messages(error),
        )


    def test_non_finite_minimum_value(self) -> None:
        for value in ("NaN", "Infinity", float("nan"), float("-inf")):
            document = self.load_thing()
            document["thingShape"]["propertyDefinitions"]["temperature"]["aspects"][
                "minimumValue"
            ] = value

            _, error = model.normalize(document, model.EntityKind.THING)
            assert error is not None, value
            self.assertEqual(
                f"Expected a finite number, but got: {value!r}",
                tests.common.most_underlying_messages(error),
            )

    def test_absent_minimum_value(self) -> None:
        document = self.load_thing()
        del document["thingShape"]["propertyDefinitions"]["temperature"]["aspects"][
            "minimumValue"
        ]

        entity = tests.common.normalize_or_raise(document, model.EntityKind.THING)
        (temperature,) = [
            prop for prop in entity.property_definitions if prop.name == "temperature"
        ]
        self.assertIsNone(temperature.aspects.minimum_value)
        self.assertEqual(125, temperature.aspects.maximum_value)

    def test_member_without_name(self) -> None:
        document = self.load_thing()
        properties = document["thingShape"]["propertyDefinitions"]
        properties[""] = properties.pop("serialNumber")

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Expected a non-empty name, but got: ''",
            tests.common.most_underlying_messages(error),
        )

    def test_parameter_without_name(self) -> None:
        document = self.load_thing()
        parameters = document["thingShape"]["serviceDefinitions"]["GetTemperature"][
            "parameterDefinitions"
        ]
        parameters[""] = parameters.pop("scale")

        _, error = model.normalize(document, model.EntityKind.THING)
        assert error is not None
        self.assertEqual(
            "Expected a non-empty name, but got: ''",
            tests.common.most_underlying_messages(error),
        )

    def test_data_shape_field_without_name(self) -> None:
        document = copy.deepcopy(dict(tests.common.load_document("data_shape")))
        document["fieldDefinitions"][""] = document["fieldDefinitions"].pop("value")

        _, error = model.normalize(document, model.EntityKind.DATA_SHAPE)
        assert error is not None
        self.assertIn(
            "In fieldDefinitions: Expected a non-empty name", error_message(error)
        )
        self.assertEqual(
            "Expected a non-empty name, but got: ''",
            tests.common.most_underlying_messages(error),
        )


if __name__ == "__main__":
    unittest.main()
