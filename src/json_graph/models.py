from enum import StrEnum

from pydantic import BaseModel, Field

PathSegment = str | int
NodePath = list[PathSegment]


class NodeKind(StrEnum):
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


class ParseErrorCode(StrEnum):
    INVALID_SYMBOL = "InvalidSymbol"
    INVALID_NUMBER_FORMAT = "InvalidNumberFormat"
    PROPERTY_NAME_EXPECTED = "PropertyNameExpected"
    VALUE_EXPECTED = "ValueExpected"
    COLON_EXPECTED = "ColonExpected"
    COMMA_EXPECTED = "CommaExpected"
    CLOSE_BRACE_EXPECTED = "CloseBraceExpected"
    CLOSE_BRACKET_EXPECTED = "CloseBracketExpected"
    END_OF_FILE_EXPECTED = "EndOfFileExpected"
    INVALID_COMMENT_TOKEN = "InvalidCommentToken"
    UNEXPECTED_END_OF_COMMENT = "UnexpectedEndOfComment"
    UNEXPECTED_END_OF_STRING = "UnexpectedEndOfString"
    INVALID_UNICODE = "InvalidUnicode"
    INVALID_ESCAPE_CHARACTER = "InvalidEscapeCharacter"
    INVALID_CHARACTER = "InvalidCharacter"


class StructuralNode(BaseModel):
    kind: NodeKind
    value: str | int | float | bool | None = None
    children: list[tuple[PathSegment, "StructuralNode"]] = Field(default_factory=list)
    offset: int = 0
    length: int = 0


StructuralNode.model_rebuild()  # necessary for recursive types


class ParseError(BaseModel):
    """A syntax problem at a character span of the source text."""

    code: ParseErrorCode
    offset: int
    length: int = 0


class ParseResult(BaseModel):
    tree: StructuralNode | None = None
    errors: list[ParseError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.tree is not None and not self.errors


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class GraphNode(BaseModel):
    id: str
    type: NodeKind
    label: str
    display_value: str | None = None
    child_count: int = 0
    path: NodePath = Field(default_factory=list)
    position: Position = Field(default_factory=Position)
    width: float = 150.0
    height: float = 40.0
    collapsed: bool = False
    offset: int = 0
    length: int = 0

    @property
    def collapsible(self) -> bool:
        return self.child_count > 0


class GraphEdge(BaseModel):
    id: str
    source: str
    target: str


class ValidationMarker(BaseModel):
    severity: int
    message: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int


class DocumentStatus(BaseModel):
    valid: bool = True
    error: str | None = None
    size_bytes: int = 0
    size_warning: bool = False


class WorkerRequest(BaseModel):
    request_id: int
    text: str


class WorkerResponse(BaseModel):
    """Exactly one of ``nodes``/``edges`` or ``errors`` is populated."""

    request_id: int
    nodes: list[GraphNode] | None = None
    edges: list[GraphEdge] | None = None
    errors: list[ParseError] | None = None
