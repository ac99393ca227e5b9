import dataclasses
from typing import Self, TypeAlias

from cqlselect import common


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Named:
    """A name with an optional alias."""

    name: common.Identifier
    alias: common.Identifier | None = None

    @classmethod
    def aliased(
        cls, name: str, name_span: common.Span, alias: str, alias_span: common.Span
    ) -> Self:
        return cls(
            name=common.Identifier.parse(name, name_span),
            alias=common.Identifier.parse(alias, alias_span),
        )

    @classmethod
    def simple(cls, name: str, span: common.Span) -> Self:
        return cls(name=common.Identifier.parse(name, span))

    def effective_name(self) -> common.Identifier:
        """The name this item is known by in the output."""
        if self.alias is None:
            return self.name
        return self.alias

    def __str__(self) -> str:
        if self.alias is None:
            return str(self.name)
        return f"{self.name} AS {self.alias}"


@dataclasses.dataclass(frozen=True, slots=True)
class Star:
    def __str__(self) -> str:
        return "*"


@dataclasses.dataclass(frozen=True, slots=True)
class Column:
    named: Named

    def __str__(self) -> str:
        return str(self.named)


@dataclasses.dataclass(frozen=True, slots=True)
class Function:
    named: Named

    def __str__(self) -> str:
        return str(self.named)


SelectElement: TypeAlias = Star | Column | Function


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Select:
    distinct: bool = False
    json: bool = False
    table_name: common.FQName
    columns: tuple[SelectElement, ...]
    where_clause: tuple[common.Relation, ...] = ()
    order: common.OrderClause | None = None
    limit: int | None = None
    filtering: bool = False

    def select_names(self) -> list[str]:
        """Base names of the selected columns. Functions and ``*`` are skipped."""
        names: list[str] = []
        for element in self.columns:
            match element:
                case Column(named):
                    names.append(str(named.name))
                case Star() | Function():
                    pass
        return names

    def select_alias(self) -> list[common.Identifier]:
        """Like `select_names`, but preferring each column's alias."""
        aliases: list[common.Identifier] = []
        for element in self.columns:
            match element:
                case Column(named):
                    aliases.append(named.effective_name())
                case Star() | Function():
                    pass
        return aliases

    def __str__(self) -> str:
        parts = ["SELECT "]
        if self.distinct:
            parts.append("DISTINCT ")
        if self.json:
            parts.append("JSON ")
        parts.append(", ".join(str(element) for element in self.columns))
        parts.append(f" FROM {self.table_name}")
        if self.where_clause:
            parts.append(" WHERE ")
            parts.append(" AND ".join(str(rel) for rel in self.where_clause))
        if self.order is not None:
            parts.append(f" ORDER BY {self.order}")
        if self.limit is not None:
            parts.append(f" LIMIT {self.limit}")
        if self.filtering:
            parts.append(" ALLOW FILTERING")
        return "".join(parts)
