"""Compile the entity documents into class declarations and report the failures."""
import textwrap
from typing import (
    Any,
    List,
    Mapping,
    Optional,
    Sequence,
    TextIO,
    Tuple,
)

from icontract import require, ensure

from twx_ts_codegen import common, model
from twx_ts_codegen.common import Error
from twx_ts_codegen.typescript import naming, structure, tree

Options = common.Options


class CompiledEntity:
    """Represent the class declaration generated for an entity."""

    #: Declaration of the class generated for the entity
    declaration: tree.ClassDeclaration

    #: Name of the generated class
    class_name: str

    @require(lambda declaration, class_name: declaration.name == class_name)
    def __init__(self, declaration: tree.ClassDeclaration, class_name: str) -> None:
        """Initialize with the given values."""
        self.declaration = declaration
        self.class_name = class_name


# fmt: off
@require(
    lambda errors: all(
        len(error) > 0 and not error.startswith("\n")
        # This is necessary so that we do not have double bullet point.
        and not error.startswith("*") and not error.endswith("\n")
        for error in errors
    )
)
@require(lambda message: not message.endswith(":"))
@require(lambda message: not message.endswith("\n"))
@require(lambda message: not message.startswith("\n") and not message.startswith("*"))
# fmt: on
def write_error_report(message: str, errors: Sequence[str], stderr: TextIO) -> None:
    """
    Write the report (main ``message`` and details as ``errors``) to ``stderr``.

    This method helps us to have a unified way of showing errors.
    """
    stderr.write(f"{message}:\n")
    for error in errors:
        indented = textwrap.indent(error, "  ")
        indented = "* " + indented[2:]
        stderr.write(f"{indented}\n")


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def compile_entity(
    document: Mapping[str, Any],
    kind: model.EntityKind,
    options: Optional[Options] = None,
) -> Tuple[Optional[CompiledEntity], Optional[Error]]:
    """
    Normalize the entity ``document`` and generate its class declaration.

    The ``document`` is the JSON export of a single entity of the given ``kind``.
    """
    if options is None:
        options = Options()

    entity, error = model.normalize(document, kind)
    if error is not None:
        return None, error

    assert entity is not None

    declaration, error = structure.generate(entity, options)
    if error is not None:
        return None, error

    assert declaration is not None

    return (
        CompiledEntity(
            declaration=declaration,
            class_name=naming.class_name(
                entity.name, options.entity_name_separator
            ),
        ),
        None,
    )


# fmt: off
@ensure(
    lambda documents, result: len(result) == len(documents)
)
@ensure(
    lambda result: all(
        (compiled is None) ^ (error is None)
        for compiled, error in result
    )
)
# fmt: on
def compile_entities(
    documents: Sequence[Tuple[Mapping[str, Any], model.EntityKind]],
    options: Optional[Options],
    stderr: TextIO,
) -> List[Tuple[Optional[CompiledEntity], Optional[Error]]]:
    """
    Compile each of the ``documents`` on its own.

    A failure of one entity does not affect the other entities. Each failure is
    reported on ``stderr``, while nothing is written for the successful ones.
    """
    result = []  # type: List[Tuple[Optional[CompiledEntity], Optional[Error]]]

    for i, (document, kind) in enumerate(documents):
        compiled, error = compile_entity(document, kind, options)
        result.append((compiled, error))

        if error is not None:
            name = (
                document.get("name", None)
                if isinstance(document, Mapping)
                else None
            )
            headline = (
                f"Failed to compile the entity {name!r} of kind {kind.value!r}"
                if isinstance(name, str)
                else f"Failed to compile the entity at the index {i} "
                f"of kind {kind.value!r}"
            )

            write_error_report(
                message=headline,
                errors=[common.error_message(error)],
                stderr=stderr,
            )

    return result
