"""Derive identifiers of the generated code from the names of the entities."""
import re

from icontract import ensure

from twx_ts_codegen.common import IDENTIFIER_RE

# Leading characters which can not start an identifier, or runs of characters
# which can not appear in an identifier at all
_DISALLOWED_ENTITY_CHARS_RE = re.compile(r"^[^a-zA-Z_]+|[^a-zA-Z_0-9]+")


# fmt: off
@ensure(
    lambda result:
    len(result) == 0 or IDENTIFIER_RE.fullmatch(result) is not None
)
# fmt: on
def class_name(entity_name: str, separator: str = "_") -> str:
    """
    Generate the class name of the entity named ``entity_name``.

    Every run of disallowed characters is substituted with ``separator``.

    >>> class_name("MyProject.Things.Sensor-1")
    'MyProject_Things_Sensor_1'

    >>> class_name("3D.Printer", separator="")
    'DPrinter'
    """
    return _DISALLOWED_ENTITY_CHARS_RE.sub(separator, entity_name)
