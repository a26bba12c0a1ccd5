"""Provide common functions and types for the compilation of entities."""
import inspect
import io
import re
import textwrap
from typing import (
    Optional,
    List,
    NoReturn,
    Any,
    Sequence,
)

from icontract import require, DBC


# noinspection RegExpSimplifiable
IDENTIFIER_RE = re.compile(r"[a-zA-Z_][a-zA-Z_0-9]*")


class Error:
    """
    Represent an unexpected input.

    The ``location`` points to the offending part of the input document as
    a dotted path (*e.g.*, ``serviceDefinitions.GetData``) so that the user can
    find the faulty field.
    """

    def __init__(
        self,
        location: Optional[str],
        message: str,
        underlying: Optional[List["Error"]] = None,
    ) -> None:
        self.location = location
        self.message = message
        self.underlying = underlying

    def __repr__(self) -> str:
        return (
            f"Error("
            f"location={self.location!r}, "
            f"message={self.message!r}, "
            f"underlying={self.underlying!r})"
        )


def join_location(prefix: Optional[str], *parts: str) -> str:
    """
    Append the ``parts`` to the dotted location ``prefix``.

    >>> join_location(None, "serviceDefinitions", "GetData")
    'serviceDefinitions.GetData'

    >>> join_location("thingShape", "propertyDefinitions")
    'thingShape.propertyDefinitions'
    """
    if prefix is None or len(prefix) == 0:
        return ".".join(parts)

    return ".".join([prefix, *parts])


def error_message(error: Error) -> str:
    """Render the ``error`` together with its underlying errors as text."""
    prefix = ""
    if error.location is not None:
        prefix = f"In {error.location}: "

    if error.underlying is None or len(error.underlying) == 0:
        return f"{prefix}{error.message}"

    writer = io.StringIO()
    writer.write(f"{prefix}{error.message}\n")
    for i, underlying_error in enumerate(error.underlying):
        if i > 0:
            writer.write("\n")
        indented = textwrap.indent(error_message(underlying_error), "  ")
        writer.write(indented)

    return writer.getvalue()


def assert_never(value: NoReturn) -> NoReturn:
    """
    Signal to mypy to perform an exhaustive matching.

    Please see the following page for more details:
    https://hakibenita.com/python-mypy-exhaustive-checking
    """
    assert False, f"Unhandled value: {value} ({type(value).__name__})"


def indent_but_first_line(text: str, indention: str) -> str:
    """
    Indent all but the first of the given ``text`` by ``indention``.

    For example, this helps you insert indented blocks into formatted string literals.
    """
    indented_lines = []  # type: List[str]
    for i, line in enumerate(text.splitlines()):
        if i == 0:
            indented_lines.append(line)
        else:
            if len(line) > 0:
                indented_lines.append(indention + line)
            else:
                indented_lines.append(line)

    return "\n".join(indented_lines)


def assert_union_of_descendants_exhaustive(union: Any, base_class: Any) -> None:
    """
    Check that the ``union`` covers all the concrete subclasses of ``base_class``.

    Make sure you put the assertion at the end of the module where no new classes are
    defined.

    See also for more details: https://hakibenita.com/python-mypy-exhaustive-checking
    """
    if inspect.isclass(union):
        union_map = {id(union): union}
    elif hasattr(union, "__args__"):
        union_map = {id(cls): cls for cls in union.__args__}
    else:
        raise NotImplementedError(f"We do not know how to handle the union: {union}")

    concrete_subclasses = []  # type: List[Any]

    stack = base_class.__subclasses__()  # type: List[Any]

    while len(stack) > 0:
        sub_cls = stack.pop()
        if not inspect.isabstract(sub_cls):
            concrete_subclasses.append(sub_cls)

        stack.extend(sub_cls.__subclasses__())

    subclass_map = {id(sub_cls): sub_cls for sub_cls in concrete_subclasses}

    union_set = set(union_map.keys())
    subclass_set = set(subclass_map.keys())

    if union_set != subclass_set:
        union_diff_names = sorted(
            union_map[cls_id].__name__ for cls_id in union_set - subclass_set
        )

        subclass_diff_names = sorted(
            subclass_map[cls_id].__name__ for cls_id in subclass_set - union_set
        )

        raise AssertionError(
            f"The following classes were listed in the union, "
            f"but they are not concrete sub-classes "
            f"of {base_class.__name__!r}: {union_diff_names}.\n\n"
            f"The following concrete sub-classes of {base_class.__name__!r} were "
            f"not listed in the union: {subclass_diff_names}"
        )


def all_unique(values: Sequence[str]) -> bool:
    """
    Check that there are no duplicates in ``values``.

    >>> all_unique(["a", "b"])
    True

    >>> all_unique(["a", "b", "a"])
    False
    """
    return len(set(values)) == len(values)


class Options(DBC):
    """Represent the options of the compilation passed in by the caller."""

    # fmt: off
    @require(
        lambda entity_name_separator:
        entity_name_separator == ""
        or IDENTIFIER_RE.fullmatch(entity_name_separator) is not None,
        "Separator empty or valid in an identifier on its own"
    )
    # fmt: on
    def __init__(self, entity_name_separator: str = "_") -> None:
        """Initialize with the given values."""
        #: Substitution for the characters of an entity name which are not
        #: allowed in a class name
        self.entity_name_separator = entity_name_separator
