"""AST node types for parsed CTIW documents."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ctiw.tokens import Position, Span

# Element keywords the parser accepts, in suggestion order.
ELEMENT_TYPES: tuple[str, ...] = (
    "title",
    "text",
    "line",
    "button",
    "password",
    "input",
    "divide",
    "img",
    "link",
    "heading",
    "subheading",
)

# Keywords whose statements open a block closed by the bare keyword.
CONTAINER_TYPES = frozenset({"divide"})

SPECIAL_TYPES = frozenset({"time"})

# Document-scoped settings folded into Metadata.
DOC_PROPERTIES = frozenset({"language", "font-size"})

NO_SPAN = Span(Position(0, 0, 0), Position(0, 0, 0))


@dataclass(frozen=True, slots=True)
class Metadata:
    """Document-level settings gathered from top-level statements."""

    title: str | None = None
    language: str | None = None
    font_size: float | None = None


@dataclass(frozen=True, slots=True)
class Property:
    """Document setting: =language=english= or =font-size=20=."""

    name: str
    value: str
    span: Span = NO_SPAN


@dataclass(frozen=True, slots=True)
class Special:
    """Fixed-vocabulary marker statement such as =(time)=."""

    kind: str
    span: Span = NO_SPAN


@dataclass(frozen=True, slots=True)
class ErrorNode:
    """Placeholder for a statement that could not be parsed."""

    message: str
    source_text: str
    span: Span = NO_SPAN


@dataclass(frozen=True, slots=True)
class Element:
    """An element statement; only containers carry children."""

    kind: str
    properties: Mapping[str, str] = field(default_factory=dict)
    children: tuple[Node, ...] = ()
    content: str | None = None
    depth: int = 0
    span: Span = NO_SPAN

    def __post_init__(self) -> None:
        if not isinstance(self.properties, MappingProxyType):
            object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_TYPES


Node = Element | Property | Special | ErrorNode


@dataclass(frozen=True, slots=True)
class Document:
    """Root document node."""

    children: tuple[Node, ...] = ()
    metadata: Metadata = field(default_factory=Metadata)
    span: Span = NO_SPAN


def walk(node: Document | Node) -> Iterator[Node]:
    """Yield every node below *node* depth-first, in document order."""
    stack = list(reversed(node.children)) if isinstance(node, (Document, Element)) else []
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, Element):
            stack.extend(reversed(current.children))


def collect_error_nodes(node: Document | Node) -> list[ErrorNode]:
    """Return all ErrorNode placeholders in the tree."""
    return [n for n in walk(node) if isinstance(n, ErrorNode)]


def has_special(node: Document | Node, kind: str) -> bool:
    """Return True if a Special of the given kind appears anywhere below *node*."""
    return any(isinstance(n, Special) and n.kind == kind for n in walk(node))
