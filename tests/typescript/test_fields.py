# pylint: disable=missing-docstring

import unittest

from twx_ts_codegen.model import (
    BaseType,
    DataShapeField,
    FieldAspects,
    LocalPropertyBinding,
    PermissionEntry,
    PermissionKind,
    PrincipalType,
    PropertyDefinition,
    RemotePropertyBinding,
    RuntimePermission,
)
from twx_ts_codegen.typescript import fields, tree

import tests.common


class Test_generate_property(unittest.TestCase):
    def test_persistent_with_default(self) -> None:
        prop = PropertyDefinition(
            name="x",
            base_type=BaseType.NUMBER,
            description=None,
            aspects=FieldAspects(is_persistent=True, default_value=5),
        )

        declaration, error = fields.generate_property(prop, None)
        assert error is None
        assert declaration is not None

        self.assertEqual("x", declaration.name)
        self.assertEqual("NUMBER", tests.common.render_type(declaration.type_node))
        self.assertListEqual(
            ["@persistent"],
            [
                tests.common.render_decorator(decorator)
                for decorator in declaration.decorators
            ],
        )
        assert declaration.initializer is not None
        self.assertEqual(
            "5", tests.common.render_expression(declaration.initializer)
        )
        self.assertFalse(declaration.is_definite)
        self.assertIsNone(declaration.comment)

    def test_decorators_in_order(self) -> None:
        prop = PropertyDefinition(
            name="temperature",
            base_type=BaseType.NUMBER,
            description="Last measured temperature.",
            aspects=FieldAspects(
                minimum_value=-40,
                maximum_value=125,
                units="C",
                is_persistent=True,
                is_logged=True,
                data_change_type="VALUE",
                data_change_threshold=0.5,
                is_read_only=True,
            ),
        )

        declaration, error = fields.generate_property(prop, None)
        assert error is None
        assert declaration is not None

        self.assertListEqual(
            [
                "@minimumValue(-40)",
                "@maximumValue(125)",
                '@unit("C")',
                "@persistent",
                "@logged",
                '@dataChangeType("VALUE", 0.5)',
            ],
            [
                tests.common.render_decorator(decorator)
                for decorator in declaration.decorators
            ],
        )
        self.assertTrue(declaration.is_readonly)
        self.assertTrue(declaration.is_definite)
        self.assertIsNone(declaration.initializer)
        assert declaration.comment is not None
        self.assertEqual(
            "/**\n * Last measured temperature.\n */", declaration.comment.text
        )

    def test_zero_bounds_are_kept(self) -> None:
        prop = PropertyDefinition(
            name="level",
            base_type=BaseType.INTEGER,
            description=None,
            aspects=FieldAspects(
                minimum_value=0,
                maximum_value=0,
                default_value=0,
                data_change_type="ALWAYS",
                data_change_threshold=0,
            ),
        )

        declaration, error = fields.generate_property(prop, None)
        assert error is None
        assert declaration is not None

        self.assertListEqual(
            [
                "@minimumValue(0)",
                "@maximumValue(0)",
                '@dataChangeType("ALWAYS", 0)',
            ],
            [
                tests.common.render_decorator(decorator)
                for decorator in declaration.decorators
            ],
        )
        self.assertIsNotNone(declaration.initializer)

    def test_remote_binding_keeps_only_the_known_settings(self) -> None:
        prop = PropertyDefinition(
            name="remoteValue",
            base_type=BaseType.NUMBER,
            description=None,
            aspects=FieldAspects(is_remote=True),
            remote_binding=RemotePropertyBinding(
                source_name="plc.value",
                options={"pushType": "VALUE", "unknownSetting": 1, "timeout": 0},
            ),
        )

        declaration, error = fields.generate_property(prop, None)
        assert error is None
        assert declaration is not None

        self.assertListEqual(
            ['@remote("plc.value", {pushType: "VALUE", timeout: 0})'],
            [
                tests.common.render_decorator(decorator)
                for decorator in declaration.decorators
            ],
        )

    def test_remote_binding_without_remote_aspect_is_ignored(self) -> None:
        prop = PropertyDefinition(
            name="remoteValue",
            base_type=BaseType.NUMBER,
            description=None,
            aspects=FieldAspects(),
            remote_binding=RemotePropertyBinding(source_name=None, options={}),
        )

        declaration, error = fields.generate_property(prop, None)
        assert error is None
        assert declaration is not None
        self.assertListEqual([], list(declaration.decorators))

    def test_remote_source_defaults_to_the_name(self) -> None:
        prop = PropertyDefinition(
            name="remoteValue",
            base_type=BaseType.NUMBER,
            description=None,
            aspects=FieldAspects(is_remote=True),
            remote_binding=RemotePropertyBinding(source_name=None, options={}),
        )

        declaration, error = fields.generate_property(prop, None)
        assert error is None
        assert declaration is not None
        self.assertListEqual(
            ['@remote("remoteValue", {})'],
            [
                tests.common.render_decorator(decorator)
                for decorator in declaration.decorators
            ],
        )

    def test_local_binding(self) -> None:
        prop = PropertyDefinition(
            name="mirroredLabel",
            base_type=BaseType.STRING,
            description=None,
            aspects=FieldAspects(),
            local_binding=LocalPropertyBinding(
                source_thing_name="Demo.Label", source_name="label"
            ),
        )

        declaration, error = fields.generate_property(prop, None)
        assert error is None
        assert declaration is not None
        self.assertListEqual(
            ['@local("Demo.Label", "label")'],
            [
                tests.common.render_decorator(decorator)
                for decorator in declaration.decorators
            ],
        )

    def test_member_permission(self) -> None:
        prop = PropertyDefinition(
            name="x",
            base_type=BaseType.STRING,
            description=None,
            aspects=FieldAspects(),
        )
        permission = RuntimePermission(
            resource_name="x",
            entries_by_kind={
                kind: (
                    [
                        PermissionEntry(
                            principal="Guest",
                            principal_type=PrincipalType.USER,
                            is_permitted=False,
                        )
                    ]
                    if kind is PermissionKind.PROPERTY_WRITE
                    else []
                )
                for kind in PermissionKind
            },
        )

        declaration, error = fields.generate_property(prop, permission)
        assert error is None
        assert declaration is not None

        self.assertListEqual(
            ["@deny(Permission.PropertyWrite, Users.Guest)"],
            [
                tests.common.render_decorator(decorator)
                for decorator in declaration.decorators
            ],
        )

    def test_unsupported_default(self) -> None:
        prop = PropertyDefinition(
            name="x",
            base_type=BaseType.JSON,
            description=None,
            aspects=FieldAspects(default_value={"a": 1}),
        )

        _, error = fields.generate_property(prop, None)
        assert error is not None
        self.assertEqual(
            "Failed to convert the default value of the field 'x'", error.message
        )


class Test_generate_data_shape_field(unittest.TestCase):
    def test_primary_key(self) -> None:
        field = DataShapeField(
            name="timestamp",
            base_type=BaseType.DATETIME,
            description=None,
            aspects=FieldAspects(is_primary_key=True, is_persistent=True),
        )

        declaration, error = fields.generate_data_shape_field(field)
        assert error is None
        assert declaration is not None

        # Persistence is a property aspect and has no meaning for data shape fields.
        self.assertListEqual(
            ["primaryKey"], tests.common.decorator_names(declaration.decorators)
        )
        self.assertTrue(declaration.is_definite)

    def test_infotable_field(self) -> None:
        field = DataShapeField(
            name="details",
            base_type=BaseType.INFOTABLE,
            description=None,
            aspects=FieldAspects(data_shape="Demo.Detail", default_value="x"),
        )

        declaration, error = fields.generate_data_shape_field(field, separator="")
        assert error is None
        assert declaration is not None

        self.assertEqual(
            "INFOTABLE<DemoDetail>", tests.common.render_type(declaration.type_node)
        )
        self.assertIsInstance(declaration.initializer, tree.StringLiteral)


if __name__ == "__main__":
    unittest.main()
