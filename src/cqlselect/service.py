import dataclasses
import logging

import pydantic

from cqlselect import common, parser, syntax

logger = logging.getLogger(__name__)


class QueryService(pydantic.BaseModel):
    """Parses and canonicalizes select statements against an optional keyspace."""

    model_config = pydantic.ConfigDict(frozen=True)
    keyspace: str | None = None

    @pydantic.field_validator("keyspace")
    @classmethod
    def _keyspace_is_identifier(cls, value: str | None) -> str | None:
        if value is not None:
            common.Identifier.parse_name(value, common.Span.of(value))
        return value

    def parse(self, text: str) -> syntax.Select:
        statement = parser.parse(text)
        if self.keyspace is None or statement.table_name.keyspace is not None:
            return statement
        logger.debug(
            "Qualifying %s with keyspace %s", statement.table_name, self.keyspace
        )
        return dataclasses.replace(
            statement,
            table_name=common.FQName(
                statement.table_name.name,
                common.Identifier.parse_name(
                    self.keyspace, common.Span.of(self.keyspace)
                ),
            ),
        )

    def canonicalize(self, text: str) -> str:
        return str(self.parse(text))
