"""Map the literals and the base types of the platform to the generated code."""
import math
from typing import Any, List, Optional, Tuple

from icontract import ensure

from twx_ts_codegen.common import Error
from twx_ts_codegen.model import BaseType, FieldAspects
from twx_ts_codegen.typescript import naming, tree


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def literal(value: Any) -> Tuple[Optional[tree.Expression], Optional[Error]]:
    """
    Generate the literal of a primitive ``value``.

    Only numbers, booleans and strings are supported.
    """
    # NOTE: bool is a subclass of int, so it has to be checked first.
    if isinstance(value, bool):
        return tree.BooleanLiteral(value), None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None, Error(
                None, f"Cannot convert to a literal the non-finite number {value!r}"
            )

        return tree.NumericLiteral(value), None

    if isinstance(value, str):
        return tree.StringLiteral(value), None

    return None, Error(
        None,
        f"Cannot convert to a literal the value of type "
        f"{type(value).__name__}: {value!r}",
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def json_literal(value: Any) -> Tuple[Optional[tree.Expression], Optional[Error]]:
    """Generate the literal representing the JSON ``value``."""
    if value is None:
        return tree.NullLiteral(), None

    if isinstance(value, dict):
        properties = []  # type: List[tree.PropertyAssignment]
        for key, item in value.items():
            if not isinstance(key, str):
                return None, Error(
                    None, f"Expected only string keys in a JSON object, got {key!r}"
                )

            item_literal, error = json_literal(item)
            if error is not None:
                return None, Error(
                    None, f"Failed to convert the value under the key {key!r}", [error]
                )

            assert item_literal is not None
            properties.append(tree.PropertyAssignment(name=key, value=item_literal))

        return tree.ObjectLiteral(properties=properties), None

    if isinstance(value, (list, tuple)):
        elements = []  # type: List[tree.Expression]
        for i, item in enumerate(value):
            item_literal, error = json_literal(item)
            if error is not None:
                return None, Error(
                    None, f"Failed to convert the item at the index {i}", [error]
                )

            assert item_literal is not None
            elements.append(item_literal)

        return tree.ArrayLiteral(elements=elements), None

    return literal(value)


def decorator(identifier: str, *args: tree.Expression) -> tree.Decorator:
    """
    Generate the decorator ``@identifier(args)``.

    If ``args`` are not given, the decorator is a plain ``@identifier``.
    """
    if len(args) == 0:
        return tree.Decorator(tree.Name(identifier))

    return tree.Decorator(tree.Call(callee=tree.Name(identifier), args=list(args)))


def entity_reference(entity_name: str, separator: str) -> tree.TypeReference:
    """Refer to the class generated for the entity ``entity_name``."""
    return tree.TypeReference(naming.class_name(entity_name, separator))


def type_node(
    base_type: BaseType, aspects: Optional[FieldAspects], separator: str
) -> tree.TypeReference:
    """
    Map the ``base_type`` to a type reference.

    Infotables are parametrized by their data shape, if specified. Thing names
    and thing template names are parametrized by the template and the shape
    they are constrained to. The platform JSON maps to ``TWJSON`` so that it
    is not confused with the built-in ``JSON``.
    """
    if base_type is BaseType.JSON:
        return tree.TypeReference("TWJSON")

    type_arguments = []  # type: List[tree.TypeNode]

    if aspects is not None:
        if base_type is BaseType.INFOTABLE and aspects.data_shape is not None:
            type_arguments.append(entity_reference(aspects.data_shape, separator))

        elif base_type in (BaseType.THINGNAME, BaseType.THINGTEMPLATENAME):
            if aspects.thing_template is not None:
                type_arguments.append(
                    entity_reference(aspects.thing_template, separator)
                )
            elif aspects.thing_shape is not None:
                type_arguments.append(tree.KeywordType(tree.Keyword.ANY))

            if aspects.thing_shape is not None:
                type_arguments.append(entity_reference(aspects.thing_shape, separator))

    return tree.TypeReference(base_type.value, type_arguments)


def doc_comment(text: str) -> tree.DocComment:
    """
    Wrap the ``text`` in a JSDoc comment.

    A ``*/`` in the text would close the comment early so we escape it.

    >>> doc_comment("Some\\ndescription").text
    '/**\\n * Some\\n * description\\n */'

    >>> doc_comment("Matches */").text
    '/**\\n * Matches *\\\\/\\n */'
    """
    escaped = text.replace("*/", "*\\/")
    return tree.DocComment("/**\n * " + escaped.replace("\n", "\n * ") + "\n */")


def optional_doc_comment(text: Optional[str]) -> Optional[tree.DocComment]:
    """Wrap the ``text`` in a JSDoc comment, if there is any text."""
    if text is None or len(text) == 0:
        return None

    return doc_comment(text)
