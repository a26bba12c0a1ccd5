"""
Merge the behavior code of the services and subscriptions into the method bodies.

The code is parsed on its own with tree-sitter. Its statements are then
detached into our :py:class:`tree.CodeNode`'s which do not refer to the parser
in any way, so they can be spliced into the generated class. Every detached
node and comment keeps the source text preceding it as its prefix, which
makes it safe to relocate.
"""
from typing import List, Optional, Sequence, Tuple

import tree_sitter
import tree_sitter_javascript
from icontract import ensure

from twx_ts_codegen.common import Error
from twx_ts_codegen.model import BaseType
from twx_ts_codegen.typescript import tree

_JS_LANGUAGE = tree_sitter.Language(tree_sitter_javascript.language())

#: Opening of the immediately-invoked function wrapping the code
FUNCTION_PREFIX = "var result = (function () {"

#: Closing of the immediately-invoked function
FUNCTION_SUFFIX = "})()"

#: Closing of the immediately-invoked function bound to the entity
FUNCTION_SUFFIX_WITH_APPLY = "}).apply(me)"

#: Identifier by which the code refers to the entity it runs on
SELF_REFERENCE = "me"

#: Statement appended to the code which only assigns the ``result``
RETURN_RESULT = "\nreturn result;"

_ACCESS_KINDS = ("member_expression", "subscript_expression")

_COMMENT_KIND = "comment"


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def strip_wrapper(
    code: str, result_type: BaseType
) -> Tuple[Optional[str], Optional[Error]]:
    """
    Strip the immediately-invoked function wrapping the ``code``, if any.

    Without the wrapper, the code assigns its result to the variable ``result``.
    Hence we append an explicit return unless the ``result_type`` is nothing.

    A trailing semicolon after the wrapper is tolerated.

    >>> strip_wrapper("var result = (function () { return 1; })();", BaseType.NUMBER)
    (' return 1; ', None)

    >>> strip_wrapper("result = 1;", BaseType.NUMBER)
    ('result = 1;\\nreturn result;', None)
    """
    stripped = code.strip()
    if stripped.startswith(FUNCTION_PREFIX):
        without_semicolon = (
            stripped[:-1].rstrip() if stripped.endswith(";") else stripped
        )

        for suffix in (FUNCTION_SUFFIX, FUNCTION_SUFFIX_WITH_APPLY):
            long_enough = len(without_semicolon) >= len(FUNCTION_PREFIX) + len(suffix)
            if long_enough and without_semicolon.endswith(suffix):
                return (
                    without_semicolon[
                        len(FUNCTION_PREFIX) : len(without_semicolon) - len(suffix)
                    ],
                    None,
                )

        return None, Error(
            None,
            f"The code starts with the wrapper {FUNCTION_PREFIX!r}, "
            f"but ends neither with {FUNCTION_SUFFIX!r} "
            f"nor with {FUNCTION_SUFFIX_WITH_APPLY!r}",
        )

    if result_type is not BaseType.NOTHING:
        return code + RETURN_RESULT, None

    return code, None


def _first_error_node(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Find the first node in the document order which failed to parse."""
    if node.type == "ERROR" or node.is_missing:
        return node

    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error_node(child)
            if found is not None:
                return found

    return None


def _text(source: bytes, start: int, end: int) -> str:
    return source[start:end].decode("utf-8")


def _with_trailing_comments(
    node: tree.CodeNode, comments: Sequence[tree.CodeComment]
) -> tree.CodeNode:
    return tree.CodeNode(
        kind=node.kind,
        text=node.text,
        children=node.children,
        field=node.field,
        prefix=node.prefix,
        leading_comments=node.leading_comments,
        trailing_comments=list(node.trailing_comments) + list(comments),
    )


def _detach_children(
    node: tree_sitter.Node, source: bytes, position: int
) -> Tuple[List[tree.CodeNode], List[tree.CodeComment]]:
    """
    Detach the children of ``node`` starting at the byte ``position``.

    Comments are attached as leading comments to the following child. The
    comments without a following child are returned separately.
    """
    children = []  # type: List[tree.CodeNode]
    pending_comments = []  # type: List[tree.CodeComment]

    cursor = node.walk()
    if not cursor.goto_first_child():
        return children, pending_comments

    while True:
        child = cursor.node
        assert child is not None

        prefix = _text(source, position, child.start_byte)
        position = child.end_byte

        if child.type == _COMMENT_KIND:
            pending_comments.append(
                tree.CodeComment(
                    text=_text(source, child.start_byte, child.end_byte),
                    prefix=prefix,
                )
            )
        else:
            children.append(
                _detach(
                    node=child,
                    source=source,
                    field=cursor.field_name,
                    prefix=prefix,
                    leading_comments=pending_comments,
                )
            )
            pending_comments = []

        if not cursor.goto_next_sibling():
            break

    return children, pending_comments


def _detach(
    node: tree_sitter.Node,
    source: bytes,
    field: Optional[str],
    prefix: str,
    leading_comments: Sequence[tree.CodeComment],
) -> tree.CodeNode:
    """Copy recursively the parsed ``node`` into our own code node."""
    children, dangling_comments = _detach_children(node, source, node.start_byte)

    if len(children) == 0:
        return tree.CodeNode(
            kind=node.type,
            text=_text(source, node.start_byte, node.end_byte),
            field=field,
            prefix=prefix,
            leading_comments=leading_comments,
        )

    if len(dangling_comments) > 0:
        children[-1] = _with_trailing_comments(children[-1], dangling_comments)

    return tree.CodeNode(
        kind=node.type,
        children=children,
        field=field,
        prefix=prefix,
        leading_comments=leading_comments,
    )


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def parse_fragment(code: str) -> Tuple[Optional[tree.Block], Optional[Error]]:
    """
    Parse the ``code`` as a standalone program and detach its statements.

    The comments after the last statement are kept as the trailing comments
    of the block.
    """
    source = code.encode("utf-8")

    parser = tree_sitter.Parser(_JS_LANGUAGE)
    parsed = parser.parse(source)
    root = parsed.root_node

    if root.has_error:
        error_node = _first_error_node(root)
        node_for_position = error_node if error_node is not None else root

        line = node_for_position.start_point[0] + 1
        column = node_for_position.start_point[1] + 1
        offending = _text(
            source, node_for_position.start_byte, node_for_position.end_byte
        )
        return None, Error(
            None,
            f"Failed to parse the code at line {line} and column {column}: "
            f"{offending!r}",
        )

    statements, trailing_comments = _detach_children(root, source, 0)

    return tree.Block(statements=statements, trailing_comments=trailing_comments), None


def _is_self_reference(node: tree.CodeNode) -> bool:
    return node.kind == "identifier" and node.text == SELF_REFERENCE


def _rewrite_code_node(node: tree.CodeNode) -> tree.CodeNode:
    """
    Rewrite ``me.x`` and ``me[x]`` to ``this.x`` and ``this[x]``, respectively.

    Only the receivers of the accesses are rewritten. The nodes which need no
    rewriting are returned as-is.
    """
    if len(node.children) == 0:
        return node

    children = [_rewrite_code_node(child) for child in node.children]

    if node.kind in _ACCESS_KINDS:
        children = [
            tree.CodeNode(
                kind="this",
                text="this",
                field=child.field,
                prefix=child.prefix,
                leading_comments=child.leading_comments,
                trailing_comments=child.trailing_comments,
            )
            if child.field == "object" and _is_self_reference(child)
            else child
            for child in children
        ]

    if all(new is old for new, old in zip(children, node.children)):
        return node

    return tree.CodeNode(
        kind=node.kind,
        text=node.text,
        children=children,
        field=node.field,
        prefix=node.prefix,
        leading_comments=node.leading_comments,
        trailing_comments=node.trailing_comments,
    )


def rewrite_self_reference(block: tree.Block) -> tree.Block:
    """Rewrite the accesses on the entity to the accesses on ``this``."""
    statements = [_rewrite_code_node(statement) for statement in block.statements]

    if all(new is old for new, old in zip(statements, block.statements)):
        return block

    return tree.Block(statements=statements, trailing_comments=block.trailing_comments)


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def generate_body(
    code: str, result_type: BaseType
) -> Tuple[Optional[tree.Block], Optional[Error]]:
    """
    Generate the method body from the behavior ``code``.

    The ``result_type`` determines whether the code needs an explicit return.
    """
    unwrapped, error = strip_wrapper(code, result_type)
    if error is not None:
        return None, error

    assert unwrapped is not None

    block, error = parse_fragment(unwrapped)
    if error is not None:
        return None, error

    assert block is not None

    return rewrite_self_reference(block), None
