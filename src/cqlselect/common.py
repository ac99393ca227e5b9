import dataclasses
import re
from typing import Self

RESERVED_KEYWORDS = frozenset(
    """
    add allow alter and apply asc authorize batch begin by columnfamily create
    delete desc describe drop entries execute from full grant if in index
    infinity insert into keyspace limit modify nan norecursive not null of on
    or order primary rename revoke schema select set table to token truncate
    unlogged update use using where with
    """.split()
)

_UNQUOTED_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_FUNCTION_RE = re.compile(r"(?P<name>[A-Za-z][A-Za-z0-9_]*)\(.*\)", re.DOTALL)
_QUOTED_RE = re.compile(r'"(?:[^"]|"")+"')


class CqlSelectError(Exception):
    pass


class InvalidIdentifier(CqlSelectError, ValueError):
    def __init__(self, text: str, span: "Span", reason: str) -> None:
        super().__init__(f"Invalid identifier {text!r} at {span}: {reason}")
        self.text = text
        self.span = span


@dataclasses.dataclass(frozen=True, slots=True)
class Span:
    start: int
    end: int

    @classmethod
    def of(cls, text: str) -> Self:
        return cls(0, len(text))

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


@dataclasses.dataclass(frozen=True, slots=True)
class Identifier:
    """A validated identifier, kept exactly as it was written."""

    text: str

    @classmethod
    def parse(cls, text: str, span: Span) -> Self:
        if _QUOTED_RE.fullmatch(text):
            return cls(text)
        if _UNQUOTED_RE.fullmatch(text):
            if text.lower() in RESERVED_KEYWORDS:
                raise InvalidIdentifier(text, span, "reserved keyword")
            return cls(text)
        if match := _FUNCTION_RE.fullmatch(text):
            if match["name"].lower() in RESERVED_KEYWORDS - {"token"}:
                raise InvalidIdentifier(text, span, "reserved keyword")
            return cls(text)
        if not text:
            raise InvalidIdentifier(text, span, "empty identifier")
        raise InvalidIdentifier(text, span, "not a valid identifier")

    @classmethod
    def parse_name(cls, text: str, span: Span) -> Self:
        """Like `parse`, but rejects the ``name(...)`` function-call form."""
        identifier = cls.parse(text, span)
        if identifier.function_call:
            raise InvalidIdentifier(text, span, "function call is not a name")
        return identifier

    @property
    def quoted(self) -> bool:
        return self.text.startswith('"')

    @property
    def function_call(self) -> bool:
        return not self.quoted and self.text.endswith(")")

    @property
    def value(self) -> str:
        """The name the server resolves: case-folded unless quoted."""
        if self.quoted:
            return self.text[1:-1].replace('""', '"')
        return self.text.lower()

    def __str__(self) -> str:
        return self.text


@dataclasses.dataclass(frozen=True, slots=True)
class FQName:
    name: Identifier
    keyspace: Identifier | None = None

    def __str__(self) -> str:
        if self.keyspace is None:
            return str(self.name)
        return f"{self.keyspace}.{self.name}"


RELATION_OPERATORS = (
    "=",
    "!=",
    "<",
    ">",
    "<=",
    ">=",
    "IN",
    "CONTAINS",
    "CONTAINS KEY",
    "LIKE",
)


@dataclasses.dataclass(frozen=True, slots=True)
class Relation:
    column: Identifier
    operator: str
    value: str

    def __str__(self) -> str:
        return f"{self.column} {self.operator} {self.value}"


@dataclasses.dataclass(frozen=True, slots=True)
class Ordering:
    column: Identifier
    descending: bool = False

    def __str__(self) -> str:
        return f"{self.column} {'DESC' if self.descending else 'ASC'}"


@dataclasses.dataclass(frozen=True, slots=True)
class OrderClause:
    orderings: tuple[Ordering, ...]

    def __str__(self) -> str:
        return ", ".join(str(ordering) for ordering in self.orderings)
