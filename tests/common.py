"""Provide common functionality across different tests."""
import json
import pathlib
from typing import Any, List, Mapping, Optional, Sequence, Union

from twx_ts_codegen import model
from twx_ts_codegen.common import Error
from twx_ts_codegen.typescript import tree


# pylint: disable=missing-function-docstring

#: Directory containing the JSON documents of the entities used in the tests
ENTITIES_DIR = pathlib.Path(__file__).parent.parent / "test_data" / "entities"


def most_underlying_messages(error_or_errors: Union[Error, Sequence[Error]]) -> str:
    """Find the "leaf" errors and render them as a new-line separated list."""
    if isinstance(error_or_errors, Error):
        errors = [error_or_errors]  # type: Sequence[Error]
    else:
        errors = error_or_errors

    most_underlying_errors = []  # type: List[Error]

    for error in errors:
        if error.underlying is None or len(error.underlying) == 0:
            most_underlying_errors.append(error)
            continue

        stack = list(error.underlying)  # type: List[Error]

        while len(stack) > 0:
            top_error = stack.pop()

            if top_error.underlying is not None:
                stack.extend(top_error.underlying)

            if top_error.underlying is None or len(top_error.underlying) == 0:
                most_underlying_errors.append(top_error)

    return "\n".join(
        most_underlying_error.message
        for most_underlying_error in most_underlying_errors
    )


def load_document(name: str) -> Mapping[str, Any]:
    """Load the JSON document of the entity from the test data."""
    path = ENTITIES_DIR / f"{name}.json"
    with path.open("rt", encoding="utf-8") as fid:
        document = json.load(fid)

    assert isinstance(document, dict), f"{path=}"
    return document


def normalize_or_raise(
    document: Mapping[str, Any], kind: model.EntityKind
) -> model.EntityUnion:
    """Normalize the ``document`` and fail the test if there is any error."""
    entity, error = model.normalize(document, kind)
    if error is not None:
        raise AssertionError(
            f"Unexpected error when normalizing the entity:\n"
            f"{most_underlying_messages(error)}"
        )

    assert entity is not None
    return entity


def decorator_names(decorators: Sequence[tree.Decorator]) -> List[str]:
    return [decorator.name for decorator in decorators]


def find_decorator(
    decorators: Sequence[tree.Decorator], name: str
) -> Optional[tree.Decorator]:
    for decorator in decorators:
        if decorator.name == name:
            return decorator

    return None


def find_member(
    declaration: tree.ClassDeclaration, name: str
) -> tree.MemberUnion:
    for member in declaration.members:
        if member.name == name:
            return member

    raise AssertionError(
        f"No member {name!r} among: {[member.name for member in declaration.members]}"
    )


def render_expression(expression: tree.Expression) -> str:
    """
    Render the ``expression`` in a compact form for the assertions.

    This is not a pretty-printer; it only covers the expressions which appear
    as arguments of the decorators.
    """
    if isinstance(expression, tree.Name):
        return expression.identifier

    if isinstance(expression, tree.StringLiteral):
        return json.dumps(expression.value)

    if isinstance(expression, tree.NumericLiteral):
        return repr(expression.value)

    if isinstance(expression, tree.BooleanLiteral):
        return "true" if expression.value else "false"

    if isinstance(expression, tree.NullLiteral):
        return "null"

    if isinstance(expression, tree.PropertyAccess):
        return f"{render_expression(expression.instance)}.{expression.name}"

    if isinstance(expression, tree.Call):
        args = ", ".join(render_expression(arg) for arg in expression.args)
        return f"{render_expression(expression.callee)}({args})"

    if isinstance(expression, tree.ObjectLiteral):
        properties = ", ".join(
            f"{prop.name}: {render_expression(prop.value)}"
            for prop in expression.properties
        )
        return f"{{{properties}}}"

    if isinstance(expression, tree.ArrayLiteral):
        elements = ", ".join(
            render_expression(element) for element in expression.elements
        )
        return f"[{elements}]"

    raise NotImplementedError(f"Unhandled expression: {expression}")


def render_decorator(decorator: tree.Decorator) -> str:
    return f"@{render_expression(decorator.expression)}"


def render_type(type_node: tree.TypeNode) -> str:
    """Render the ``type_node`` in a compact form for the assertions."""
    if isinstance(type_node, tree.TypeReference):
        if len(type_node.type_arguments) == 0:
            return type_node.name

        args = ", ".join(render_type(arg) for arg in type_node.type_arguments)
        return f"{type_node.name}<{args}>"

    if isinstance(type_node, tree.KeywordType):
        return type_node.keyword.value

    if isinstance(type_node, tree.TypeLiteral):
        members = "; ".join(
            f"{member.name}{'?' if member.is_optional else ''}: "
            f"{render_type(member.type_node)}"
            for member in type_node.members
        )
        return f"{{{members}}}"

    raise NotImplementedError(f"Unhandled type node: {type_node}")
