"""Represent the model and the generated trees as strings for testing or debugging."""

import collections.abc
import enum
import io
import textwrap
from typing import Sequence, Union, Mapping

from twx_ts_codegen.common import assert_never, indent_but_first_line

# We have to separate Stringifiable and Sequence[Stringifiable] since recursive types
# are not supported in mypy, see https://github.com/python/mypy/issues/731.
PrimitiveStringifiable = Union[
    bool, int, float, str, enum.Enum, "Entity", "Property", None
]

Stringifiable = Union[
    PrimitiveStringifiable,
    Sequence[PrimitiveStringifiable],
    Sequence[Sequence[PrimitiveStringifiable]],
    Mapping[str, PrimitiveStringifiable],
    Mapping[str, Sequence[PrimitiveStringifiable]],
]


class Property:
    """Represent a property of an entity to be stringified."""

    def __init__(self, name: str, value: Stringifiable) -> None:
        self.name = name
        self.value = value

    def __repr__(self) -> str:
        return dump(self)


class Entity:
    """Represent a stringifiable entity which is defined by its properties.

    Think of a dictionary with assigned type identifier.
    """

    def __init__(self, name: str, properties: Sequence[Property]) -> None:
        """Initialize with the given values."""
        self.name = name
        self.properties = properties

    def __repr__(self) -> str:
        return dump(self)


def dump(stringifiable: Stringifiable) -> str:
    """Produce a string representation of ``stringifiable`` for debugging or testing."""
    if isinstance(stringifiable, (bool, int, float)):
        return repr(stringifiable)

    elif isinstance(stringifiable, enum.Enum):
        return f"{stringifiable.__class__.__name__}.{stringifiable.name}"

    elif isinstance(stringifiable, str):
        if "\n" not in stringifiable or "\r" in stringifiable or '"""' in stringifiable:
            return repr(stringifiable)

        # A multi-line string literal is much more readable when it comes to diffing.
        escaped = stringifiable.replace("\\", "\\\\")

        indented = "\n".join(f"  {line}" for line in escaped.splitlines())

        return f'textwrap.dedent("""\\\n{indented}""")'

    elif isinstance(stringifiable, Entity):
        if len(stringifiable.properties) == 0:
            return f"{stringifiable.name}()"

        writer = io.StringIO()
        writer.write(f"{stringifiable.name}(\n")

        for i, prop in enumerate(stringifiable.properties):
            value_str = dump(prop.value)
            writer.write(f"  {prop.name}={indent_but_first_line(value_str, '  ')}")

            if i == len(stringifiable.properties) - 1:
                writer.write(")")
            else:
                writer.write(",\n")

        return writer.getvalue()

    elif isinstance(stringifiable, collections.abc.Sequence):
        if len(stringifiable) == 0:
            return "[]"

        writer = io.StringIO()
        writer.write("[\n")
        for i, value in enumerate(stringifiable):
            writer.write(textwrap.indent(dump(value), "  "))

            if i == len(stringifiable) - 1:
                writer.write("]")
            else:
                writer.write(",\n")

        return writer.getvalue()

    elif isinstance(stringifiable, collections.abc.Mapping):
        if len(stringifiable) == 0:
            return "{}"

        writer = io.StringIO()
        writer.write("{\n")
        for i, (key, value) in enumerate(stringifiable.items()):
            writer.write(textwrap.indent(f"{dump(key)}: {dump(value)}", "  "))

            if i == len(stringifiable) - 1:
                writer.write("}")
            else:
                writer.write(",\n")

        return writer.getvalue()

    elif stringifiable is None:
        return repr(None)

    elif isinstance(stringifiable, Property):
        value_str = dump(stringifiable.value)
        return (
            f"Property("
            f"{stringifiable.name}={indent_but_first_line(value_str, '')}"
            f")"
        )

    else:
        assert_never(stringifiable)

    raise AssertionError("Should not have gotten here")
