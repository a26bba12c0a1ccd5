"""
Provide our own syntax tree of the generated TypeScript classes.

The tree covers only the constructs that the compiler emits. The behavior
code of the entities is not re-modeled here; it is carried as the detached
:py:class:`CodeNode`'s which keep the exact text of every token.
"""
import abc
import enum
import io
from typing import Sequence, Union, Generic, TypeVar, Optional

from icontract import require, DBC

from twx_ts_codegen import stringify
from twx_ts_codegen.common import IDENTIFIER_RE

T = TypeVar("T")


class Node(abc.ABC):
    """Represent an abstract node of our syntax tree."""

    def __str__(self) -> str:
        """Provide a human-readable representation of the instance."""
        return dump(self)

    @abc.abstractmethod
    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        raise NotImplementedError()


# region Expressions


class Expression(Node):
    """Represent an expression in the generated code."""

    @abc.abstractmethod
    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        raise NotImplementedError()


class Name(Expression):
    """Represent a reference to a name such as ``persistent`` or ``Users``."""

    @require(lambda identifier: IDENTIFIER_RE.fullmatch(identifier))
    def __init__(self, identifier: str) -> None:
        """Initialize with the given values."""
        self.identifier = identifier

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_name(self)


class StringLiteral(Expression):
    """Represent a string literal."""

    def __init__(self, value: str) -> None:
        """Initialize with the given values."""
        self.value = value

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_string_literal(self)


class NumericLiteral(Expression):
    """Represent a numeric literal."""

    def __init__(self, value: Union[int, float]) -> None:
        """Initialize with the given values."""
        self.value = value

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_numeric_literal(self)


class BooleanLiteral(Expression):
    """Represent ``true`` or ``false``."""

    def __init__(self, value: bool) -> None:
        """Initialize with the given values."""
        self.value = value

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_boolean_literal(self)


class NullLiteral(Expression):
    """Represent ``null``."""

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_null_literal(self)


class PropertyAccess(Expression):
    """Represent an access such as ``Permission.PropertyRead``."""

    def __init__(self, instance: Expression, name: str) -> None:
        """Initialize with the given values."""
        self.instance = instance
        self.name = name

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_property_access(self)


class Call(Expression):
    """Represent a call such as ``unit("m/s")``."""

    def __init__(self, callee: Expression, args: Sequence[Expression]) -> None:
        """Initialize with the given values."""
        self.callee = callee
        self.args = args

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_call(self)


class PropertyAssignment(Node):
    """Represent a ``name: value`` pair of an object literal."""

    def __init__(self, name: str, value: Expression) -> None:
        """Initialize with the given values."""
        self.name = name
        self.value = value

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_property_assignment(self)


class ObjectLiteral(Expression):
    """Represent an object literal ``{name: value, ...}``."""

    def __init__(self, properties: Sequence[PropertyAssignment]) -> None:
        """Initialize with the given values."""
        self.properties = properties

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_object_literal(self)


class ArrayLiteral(Expression):
    """Represent an array literal."""

    def __init__(self, elements: Sequence[Expression]) -> None:
        """Initialize with the given values."""
        self.elements = elements

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_array_literal(self)


class ClassExpression(Expression):
    """Represent an anonymous class used as an argument of a decorator."""

    def __init__(self, members: Sequence["PropertyDeclaration"]) -> None:
        """Initialize with the given values."""
        self.members = members

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_class_expression(self)


# endregion

# region Types


class TypeNode(Node):
    """Represent a type annotation."""

    @abc.abstractmethod
    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        raise NotImplementedError()


class TypeReference(TypeNode):
    """Represent a reference to a named type, optionally with type arguments."""

    def __init__(
        self, name: str, type_arguments: Optional[Sequence[TypeNode]] = None
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.type_arguments = type_arguments if type_arguments is not None else []

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_type_reference(self)


class Keyword(enum.Enum):
    """List the keyword types we emit."""

    ANY = "any"
    VOID = "void"


class KeywordType(TypeNode):
    """Represent a keyword type such as ``any`` or ``void``."""

    def __init__(self, keyword: Keyword) -> None:
        """Initialize with the given values."""
        self.keyword = keyword

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_keyword_type(self)


class PropertySignature(Node):
    """Represent a member ``name?: type`` of a type literal."""

    def __init__(self, name: str, type_node: TypeNode, is_optional: bool) -> None:
        """Initialize with the given values."""
        self.name = name
        self.type_node = type_node
        self.is_optional = is_optional

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_property_signature(self)


class TypeLiteral(TypeNode):
    """Represent an inline object type ``{a: T; b?: U}``."""

    def __init__(self, members: Sequence[PropertySignature]) -> None:
        """Initialize with the given values."""
        self.members = members

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_type_literal(self)


# endregion

# region Embedded code


class CodeComment(Node):
    """
    Represent a comment of an embedded code fragment.

    The comment is detached from its original tree. The ``prefix`` holds the
    source text between the previous token and the comment so that the
    comment can be rendered at any position.
    """

    def __init__(self, text: str, prefix: str) -> None:
        """Initialize with the given values."""
        self.text = text
        self.prefix = prefix

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_code_comment(self)


class CodeNode(Node):
    """
    Represent a node of an embedded code fragment, detached from its parser.

    The ``kind`` is the grammar type of the node (*e.g.*, ``member_expression``)
    and the ``field`` is the role of the node in its parent (*e.g.*,
    ``object``), if any. Leaf nodes hold their ``text``, inner nodes hold
    their ``children``.
    """

    # fmt: off
    @require(
        lambda text, children:
        not (text is not None and children is not None and len(children) > 0),
        "Either a leaf with text or an inner node"
    )
    # fmt: on
    def __init__(
        self,
        kind: str,
        text: Optional[str] = None,
        children: Optional[Sequence["CodeNode"]] = None,
        field: Optional[str] = None,
        prefix: str = "",
        leading_comments: Optional[Sequence[CodeComment]] = None,
        trailing_comments: Optional[Sequence[CodeComment]] = None,
    ) -> None:
        """Initialize with the given values."""
        self.kind = kind
        self.text = text
        self.children = children if children is not None else []
        self.field = field
        self.prefix = prefix
        self.leading_comments = (
            leading_comments if leading_comments is not None else []
        )
        self.trailing_comments = (
            trailing_comments if trailing_comments is not None else []
        )

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_code_node(self)


class Block(Node):
    """Represent the body of a method as a list of embedded statements."""

    def __init__(
        self,
        statements: Sequence[CodeNode],
        trailing_comments: Optional[Sequence[CodeComment]] = None,
    ) -> None:
        """Initialize with the given values."""
        self.statements = statements
        self.trailing_comments = (
            trailing_comments if trailing_comments is not None else []
        )

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_block(self)


# endregion

# region Declarations


class DocComment(Node):
    """Represent a documentation comment in JSDoc form (``/** ... */``)."""

    @require(lambda text: text.startswith("/**") and text.endswith("*/"))
    @require(lambda text: "*/" not in text[3:-2], "Closed only at the end")
    def __init__(self, text: str) -> None:
        """Initialize with the given values."""
        self.text = text

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_doc_comment(self)


class Decorator(Node):
    """Represent a decorator ``@name`` or ``@name(args)``."""

    def __init__(self, expression: Union[Name, Call]) -> None:
        """Initialize with the given values."""
        self.expression = expression

    @property
    def name(self) -> str:
        """Give the name of the decorator regardless of its arguments."""
        if isinstance(self.expression, Call):
            assert isinstance(self.expression.callee, Name)
            return self.expression.callee.identifier

        return self.expression.identifier

    @property
    def args(self) -> Sequence[Expression]:
        """List the arguments of the decorator; empty if the decorator is a name."""
        if isinstance(self.expression, Call):
            return self.expression.args

        return []

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_decorator(self)


class PropertyDeclaration(Node):
    """
    Represent a property of a class.

    A property is either initialized or ``is_definite``
    (``name!: type``), never both.
    """

    # fmt: off
    @require(
        lambda is_definite, initializer:
        not (is_definite and initializer is not None)
    )
    # fmt: on
    def __init__(
        self,
        name: str,
        type_node: TypeNode,
        decorators: Optional[Sequence[Decorator]] = None,
        is_readonly: bool = False,
        is_definite: bool = False,
        initializer: Optional[Expression] = None,
        comment: Optional[DocComment] = None,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.type_node = type_node
        self.decorators = decorators if decorators is not None else []
        self.is_readonly = is_readonly
        self.is_definite = is_definite
        self.initializer = initializer
        self.comment = comment

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_property_declaration(self)


class BindingElement(Node):
    """Represent an element ``name = default`` of an object binding pattern."""

    def __init__(self, name: str, initializer: Optional[Expression] = None) -> None:
        """Initialize with the given values."""
        self.name = name
        self.initializer = initializer

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_binding_element(self)


class ObjectBindingPattern(Node):
    """Represent a destructuring ``{a, b = 1}`` of a parameter."""

    def __init__(self, elements: Sequence[BindingElement]) -> None:
        """Initialize with the given values."""
        self.elements = elements

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_object_binding_pattern(self)


class Parameter(Node):
    """Represent a parameter of a method."""

    def __init__(
        self, name: Union[str, ObjectBindingPattern], type_node: TypeNode
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.type_node = type_node

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_parameter(self)


class MethodDeclaration(Node):
    """Represent a method of a class."""

    def __init__(
        self,
        name: str,
        parameters: Sequence[Parameter],
        return_type: TypeNode,
        body: Block,
        decorators: Optional[Sequence[Decorator]] = None,
        is_async: bool = False,
        comment: Optional[DocComment] = None,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.parameters = parameters
        self.return_type = return_type
        self.body = body
        self.decorators = decorators if decorators is not None else []
        self.is_async = is_async
        self.comment = comment

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_method_declaration(self)


MemberUnion = Union[PropertyDeclaration, MethodDeclaration]


class ClassDeclaration(Node):
    """Represent the class compiled from an entity."""

    @require(lambda name: IDENTIFIER_RE.fullmatch(name))
    def __init__(
        self,
        name: str,
        members: Sequence[MemberUnion],
        decorators: Optional[Sequence[Decorator]] = None,
        extends: Optional[Expression] = None,
        comment: Optional[DocComment] = None,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.members = members
        self.decorators = decorators if decorators is not None else []
        self.extends = extends
        self.comment = comment

    def transform(self, transformer: "Transformer[T]") -> T:
        """Accept the transformer."""
        return transformer.transform_class_declaration(self)


# endregion


class Transformer(Generic[T], DBC):
    """Transform our syntax tree into something."""

    def transform(self, node: Node) -> T:
        """Dispatch to the appropriate transformation method."""
        return node.transform(self)

    @abc.abstractmethod
    def transform_name(self, node: Name) -> T:
        """Transform a name to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_string_literal(self, node: StringLiteral) -> T:
        """Transform a string literal to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_numeric_literal(self, node: NumericLiteral) -> T:
        """Transform a numeric literal to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_boolean_literal(self, node: BooleanLiteral) -> T:
        """Transform a boolean literal to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_null_literal(self, node: NullLiteral) -> T:
        """Transform a null literal to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_property_access(self, node: PropertyAccess) -> T:
        """Transform a property access to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_call(self, node: Call) -> T:
        """Transform a call to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_property_assignment(self, node: PropertyAssignment) -> T:
        """Transform a property assignment to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_object_literal(self, node: ObjectLiteral) -> T:
        """Transform an object literal to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_array_literal(self, node: ArrayLiteral) -> T:
        """Transform an array literal to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_class_expression(self, node: ClassExpression) -> T:
        """Transform a class expression to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_type_reference(self, node: TypeReference) -> T:
        """Transform a type reference to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_keyword_type(self, node: KeywordType) -> T:
        """Transform a keyword type to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_property_signature(self, node: PropertySignature) -> T:
        """Transform a property signature to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_type_literal(self, node: TypeLiteral) -> T:
        """Transform a type literal to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_code_comment(self, node: CodeComment) -> T:
        """Transform a comment of an embedded code to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_code_node(self, node: CodeNode) -> T:
        """Transform a node of an embedded code to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_block(self, node: Block) -> T:
        """Transform a block to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_doc_comment(self, node: DocComment) -> T:
        """Transform a documentation comment to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_decorator(self, node: Decorator) -> T:
        """Transform a decorator to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_property_declaration(self, node: PropertyDeclaration) -> T:
        """Transform a property declaration to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_binding_element(self, node: BindingElement) -> T:
        """Transform a binding element to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_object_binding_pattern(self, node: ObjectBindingPattern) -> T:
        """Transform an object binding pattern to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_parameter(self, node: Parameter) -> T:
        """Transform a parameter to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_method_declaration(self, node: MethodDeclaration) -> T:
        """Transform a method declaration to something."""
        raise NotImplementedError(f"{node=}")

    @abc.abstractmethod
    def transform_class_declaration(self, node: ClassDeclaration) -> T:
        """Transform a class declaration to something."""
        raise NotImplementedError(f"{node=}")


class _StringifyTransformer(Transformer[stringify.Entity]):
    """Transform a node into a stringifiable representation."""

    def _transform_optional(self, node: Optional[Node]) -> Optional[stringify.Entity]:
        return self.transform(node) if node is not None else None

    def transform_name(self, node: Name) -> stringify.Entity:
        return stringify.Entity(
            name=Name.__name__,
            properties=[stringify.Property("identifier", node.identifier)],
        )

    def transform_string_literal(self, node: StringLiteral) -> stringify.Entity:
        return stringify.Entity(
            name=StringLiteral.__name__,
            properties=[stringify.Property("value", node.value)],
        )

    def transform_numeric_literal(self, node: NumericLiteral) -> stringify.Entity:
        return stringify.Entity(
            name=NumericLiteral.__name__,
            properties=[stringify.Property("value", node.value)],
        )

    def transform_boolean_literal(self, node: BooleanLiteral) -> stringify.Entity:
        return stringify.Entity(
            name=BooleanLiteral.__name__,
            properties=[stringify.Property("value", node.value)],
        )

    def transform_null_literal(self, node: NullLiteral) -> stringify.Entity:
        return stringify.Entity(name=NullLiteral.__name__, properties=[])

    def transform_property_access(self, node: PropertyAccess) -> stringify.Entity:
        return stringify.Entity(
            name=PropertyAccess.__name__,
            properties=[
                stringify.Property("instance", self.transform(node.instance)),
                stringify.Property("name", node.name),
            ],
        )

    def transform_call(self, node: Call) -> stringify.Entity:
        return stringify.Entity(
            name=Call.__name__,
            properties=[
                stringify.Property("callee", self.transform(node.callee)),
                stringify.Property("args", [self.transform(arg) for arg in node.args]),
            ],
        )

    def transform_property_assignment(
        self, node: PropertyAssignment
    ) -> stringify.Entity:
        return stringify.Entity(
            name=PropertyAssignment.__name__,
            properties=[
                stringify.Property("name", node.name),
                stringify.Property("value", self.transform(node.value)),
            ],
        )

    def transform_object_literal(self, node: ObjectLiteral) -> stringify.Entity:
        return stringify.Entity(
            name=ObjectLiteral.__name__,
            properties=[
                stringify.Property(
                    "properties", [self.transform(prop) for prop in node.properties]
                )
            ],
        )

    def transform_array_literal(self, node: ArrayLiteral) -> stringify.Entity:
        return stringify.Entity(
            name=ArrayLiteral.__name__,
            properties=[
                stringify.Property(
                    "elements", [self.transform(element) for element in node.elements]
                )
            ],
        )

    def transform_class_expression(self, node: ClassExpression) -> stringify.Entity:
        return stringify.Entity(
            name=ClassExpression.__name__,
            properties=[
                stringify.Property(
                    "members", [self.transform(member) for member in node.members]
                )
            ],
        )

    def transform_type_reference(self, node: TypeReference) -> stringify.Entity:
        return stringify.Entity(
            name=TypeReference.__name__,
            properties=[
                stringify.Property("name", node.name),
                stringify.Property(
                    "type_arguments",
                    [self.transform(argument) for argument in node.type_arguments],
                ),
            ],
        )

    def transform_keyword_type(self, node: KeywordType) -> stringify.Entity:
        return stringify.Entity(
            name=KeywordType.__name__,
            properties=[stringify.Property("keyword", node.keyword)],
        )

    def transform_property_signature(
        self, node: PropertySignature
    ) -> stringify.Entity:
        return stringify.Entity(
            name=PropertySignature.__name__,
            properties=[
                stringify.Property("name", node.name),
                stringify.Property("type_node", self.transform(node.type_node)),
                stringify.Property("is_optional", node.is_optional),
            ],
        )

    def transform_type_literal(self, node: TypeLiteral) -> stringify.Entity:
        return stringify.Entity(
            name=TypeLiteral.__name__,
            properties=[
                stringify.Property(
                    "members", [self.transform(member) for member in node.members]
                )
            ],
        )

    def transform_code_comment(self, node: CodeComment) -> stringify.Entity:
        return stringify.Entity(
            name=CodeComment.__name__,
            properties=[
                stringify.Property("text", node.text),
                stringify.Property("prefix", node.prefix),
            ],
        )

    def transform_code_node(self, node: CodeNode) -> stringify.Entity:
        return stringify.Entity(
            name=CodeNode.__name__,
            properties=[
                stringify.Property("kind", node.kind),
                stringify.Property("text", node.text),
                stringify.Property(
                    "children", [self.transform(child) for child in node.children]
                ),
                stringify.Property("field", node.field),
                stringify.Property("prefix", node.prefix),
                stringify.Property(
                    "leading_comments",
                    [self.transform(comment) for comment in node.leading_comments],
                ),
                stringify.Property(
                    "trailing_comments",
                    [self.transform(comment) for comment in node.trailing_comments],
                ),
            ],
        )

    def transform_block(self, node: Block) -> stringify.Entity:
        return stringify.Entity(
            name=Block.__name__,
            properties=[
                stringify.Property(
                    "statements",
                    [self.transform(statement) for statement in node.statements],
                ),
                stringify.Property(
                    "trailing_comments",
                    [self.transform(comment) for comment in node.trailing_comments],
                ),
            ],
        )

    def transform_doc_comment(self, node: DocComment) -> stringify.Entity:
        return stringify.Entity(
            name=DocComment.__name__,
            properties=[stringify.Property("text", node.text)],
        )

    def transform_decorator(self, node: Decorator) -> stringify.Entity:
        return stringify.Entity(
            name=Decorator.__name__,
            properties=[
                stringify.Property("expression", self.transform(node.expression))
            ],
        )

    def transform_property_declaration(
        self, node: PropertyDeclaration
    ) -> stringify.Entity:
        return stringify.Entity(
            name=PropertyDeclaration.__name__,
            properties=[
                stringify.Property("name", node.name),
                stringify.Property("type_node", self.transform(node.type_node)),
                stringify.Property(
                    "decorators",
                    [self.transform(decorator) for decorator in node.decorators],
                ),
                stringify.Property("is_readonly", node.is_readonly),
                stringify.Property("is_definite", node.is_definite),
                stringify.Property(
                    "initializer", self._transform_optional(node.initializer)
                ),
                stringify.Property("comment", self._transform_optional(node.comment)),
            ],
        )

    def transform_binding_element(self, node: BindingElement) -> stringify.Entity:
        return stringify.Entity(
            name=BindingElement.__name__,
            properties=[
                stringify.Property("name", node.name),
                stringify.Property(
                    "initializer", self._transform_optional(node.initializer)
                ),
            ],
        )

    def transform_object_binding_pattern(
        self, node: ObjectBindingPattern
    ) -> stringify.Entity:
        return stringify.Entity(
            name=ObjectBindingPattern.__name__,
            properties=[
                stringify.Property(
                    "elements", [self.transform(element) for element in node.elements]
                )
            ],
        )

    def transform_parameter(self, node: Parameter) -> stringify.Entity:
        return stringify.Entity(
            name=Parameter.__name__,
            properties=[
                stringify.Property(
                    "name",
                    (
                        node.name
                        if isinstance(node.name, str)
                        else self.transform(node.name)
                    ),
                ),
                stringify.Property("type_node", self.transform(node.type_node)),
            ],
        )

    def transform_method_declaration(
        self, node: MethodDeclaration
    ) -> stringify.Entity:
        return stringify.Entity(
            name=MethodDeclaration.__name__,
            properties=[
                stringify.Property("name", node.name),
                stringify.Property(
                    "parameters",
                    [self.transform(parameter) for parameter in node.parameters],
                ),
                stringify.Property("return_type", self.transform(node.return_type)),
                stringify.Property("body", self.transform(node.body)),
                stringify.Property(
                    "decorators",
                    [self.transform(decorator) for decorator in node.decorators],
                ),
                stringify.Property("is_async", node.is_async),
                stringify.Property("comment", self._transform_optional(node.comment)),
            ],
        )

    def transform_class_declaration(
        self, node: ClassDeclaration
    ) -> stringify.Entity:
        return stringify.Entity(
            name=ClassDeclaration.__name__,
            properties=[
                stringify.Property("name", node.name),
                stringify.Property(
                    "members", [self.transform(member) for member in node.members]
                ),
                stringify.Property(
                    "decorators",
                    [self.transform(decorator) for decorator in node.decorators],
                ),
                stringify.Property("extends", self._transform_optional(node.extends)),
                stringify.Property("comment", self._transform_optional(node.comment)),
            ],
        )


def dump(node: Node) -> str:
    """Produce a string representation of the tree."""
    transformer = _StringifyTransformer()
    return stringify.dump(transformer.transform(node))


def _write_code_text(node: Union[CodeNode, CodeComment], writer: io.StringIO) -> None:
    if isinstance(node, CodeComment):
        writer.write(node.prefix)
        writer.write(node.text)
        return

    for comment in node.leading_comments:
        _write_code_text(comment, writer)

    writer.write(node.prefix)
    if node.text is not None:
        writer.write(node.text)

    for child in node.children:
        _write_code_text(child, writer)

    for comment in node.trailing_comments:
        _write_code_text(comment, writer)


def code_text(node: Union[CodeNode, Block]) -> str:
    """
    Reconstruct the source text of the embedded code ``node``.

    The text includes the whitespace and the comments preceding each token.
    """
    writer = io.StringIO()
    if isinstance(node, Block):
        for statement in node.statements:
            _write_code_text(statement, writer)

        for comment in node.trailing_comments:
            _write_code_text(comment, writer)
    else:
        _write_code_text(node, writer)

    return writer.getvalue()
