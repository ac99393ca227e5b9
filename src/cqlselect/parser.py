import dataclasses
import logging

import pyparsing
from pyparsing import pyparsing_common as ppc

from cqlselect import common, syntax

logger = logging.getLogger(__name__)

pyparsing.ParserElement.enable_packrat()


@dataclasses.dataclass(frozen=True, slots=True)
class _Located:
    text: str
    span: common.Span


def _locate(instring: str, loc: int, toks: pyparsing.ParseResults) -> _Located:
    text = toks[0]
    return _Located(text, common.Span(loc, loc + len(text)))


# define CQL tokens

(
    SELECT,
    DISTINCT,
    JSON,
    AS,
    FROM,
    WHERE,
    AND,
    ORDER,
    BY,
    ASC,
    DESC,
    LIMIT,
    ALLOW,
    FILTERING,
    IN,
    CONTAINS,
    KEY,
    LIKE,
    TRUE,
    FALSE,
    NULL,
) = map(
    pyparsing.CaselessKeyword,
    """select distinct json as from where and order by asc desc limit allow
    filtering in contains key like true false null""".split(),
)
KEYWORD = pyparsing.MatchFirst(
    pyparsing.CaselessKeyword(word) for word in sorted(common.RESERVED_KEYWORDS)
)

NAME = pyparsing.Word(pyparsing.alphas, pyparsing.alphanums + "_")
UNQUOTED_NAME = ~KEYWORD + NAME
QUOTED_NAME = pyparsing.QuotedString('"', esc_quote='""', unquote_results=False)

IDENTIFIER = (QUOTED_NAME | UNQUOTED_NAME).set_parse_action(_locate)

# terms are kept as canonical text

TERM = pyparsing.Forward()
NUMBER = pyparsing.Regex(r"[+-]?\d+(\.\d*)?([eE][+-]?\d+)?")
STRING_LITERAL = pyparsing.QuotedString("'", esc_quote="''", unquote_results=False)
BIND_MARKER = pyparsing.Literal("?") | pyparsing.Combine(":" + NAME)
CONSTANT = (TRUE | FALSE | NULL).add_parse_action(ppc.downcase_tokens)
TERM_LIST = (
    pyparsing.Suppress("(")
    + pyparsing.Opt(pyparsing.DelimitedList(TERM))
    + pyparsing.Suppress(")")
).set_parse_action(lambda toks: "(" + ", ".join(toks) + ")")
TERM <<= NUMBER | STRING_LITERAL | BIND_MARKER | CONSTANT | TERM_LIST

FUNCTION_CALL = pyparsing.Forward()
FUNCTION_ARG = FUNCTION_CALL | TERM | (QUOTED_NAME | UNQUOTED_NAME)
FUNCTION_CALL <<= (
    NAME
    + pyparsing.Suppress("(")
    + pyparsing.Group(
        pyparsing.Opt(pyparsing.Literal("*") | pyparsing.DelimitedList(FUNCTION_ARG))
    )
    + pyparsing.Suppress(")")
).set_parse_action(lambda toks: f"{toks[0]}({', '.join(toks[1])})")

SELECTOR = pyparsing.Group(
    (
        FUNCTION_CALL.copy().add_parse_action(_locate)("function")
        | IDENTIFIER("column")
    )
    + pyparsing.Opt(AS + IDENTIFIER("alias"))
)
SELECTOR_LIST = pyparsing.Group(
    pyparsing.Literal("*")("star") | pyparsing.DelimitedList(SELECTOR)
)

TABLE_NAME = pyparsing.Group(
    pyparsing.Opt(IDENTIFIER("keyspace") + pyparsing.Suppress("."))
    + IDENTIFIER("table")
)

REL_OP = (
    pyparsing.one_of("= != < > >= <=")
    | IN
    | pyparsing.Combine(CONTAINS + KEY, adjacent=False, join_string=" ")
    | CONTAINS
    | LIKE
).add_parse_action(ppc.upcase_tokens)
RELATION = pyparsing.Group(IDENTIFIER("column") + REL_OP("operator") + TERM("value"))
WHERE_CLAUSE = pyparsing.Group(pyparsing.DelimitedList(RELATION, delim=AND))

ORDERING = pyparsing.Group(
    IDENTIFIER("column") + pyparsing.Opt(ASC | DESC, "ASC")("direction")
)
ORDER_CLAUSE = pyparsing.Group(pyparsing.DelimitedList(ORDERING))

# distinct and json are not reserved, so they are only flags when a projection follows
PROJECTION = SELECTOR_LIST + FROM
JSON_FLAG = JSON + pyparsing.FollowedBy(PROJECTION)
DISTINCT_FLAG = DISTINCT + pyparsing.FollowedBy(JSON_FLAG | PROJECTION)

# define the grammar
SELECT_STMT = (
    SELECT
    + pyparsing.Opt(DISTINCT_FLAG)("distinct")
    + pyparsing.Opt(JSON_FLAG)("json")
    + SELECTOR_LIST("columns")
    + FROM
    + TABLE_NAME("table_name")
    + pyparsing.Opt(WHERE + WHERE_CLAUSE("where"))
    + pyparsing.Opt(ORDER + BY + ORDER_CLAUSE("order"))
    + pyparsing.Opt(LIMIT + ppc.signed_integer("limit"))
    + pyparsing.Opt(ALLOW + FILTERING)("filtering")
    + pyparsing.Opt(pyparsing.Suppress(";"))
    + pyparsing.StringEnd()
).set_results_name("select_statement")

# define CQL comment format, and ignore them
CQL_COMMENT = "--" + pyparsing.rest_of_line
SELECT_STMT.ignore(CQL_COMMENT)


def _identifier(located: _Located) -> common.Identifier:
    return common.Identifier.parse(located.text, located.span)


def _select_element(selector: pyparsing.ParseResults) -> syntax.SelectElement:
    alias = _identifier(selector["alias"]) if "alias" in selector else None
    if "function" in selector:
        return syntax.Function(
            syntax.Named(name=_identifier(selector["function"]), alias=alias)
        )
    return syntax.Column(
        syntax.Named(name=_identifier(selector["column"]), alias=alias)
    )


def _table_name(results: pyparsing.ParseResults) -> common.FQName:
    keyspace = _identifier(results["keyspace"]) if "keyspace" in results else None
    return common.FQName(_identifier(results["table"]), keyspace)


def _relation(results: pyparsing.ParseResults) -> common.Relation:
    return common.Relation(
        column=_identifier(results["column"]),
        operator=results["operator"],
        value=results["value"],
    )


def _ordering(results: pyparsing.ParseResults) -> common.Ordering:
    return common.Ordering(
        column=_identifier(results["column"]),
        descending=results["direction"].upper() == "DESC",
    )


def parse(text: str) -> syntax.Select:
    results = SELECT_STMT.parse_string(text)
    logger.debug("Parsed select statement %r", text)

    selectors = results["columns"]
    columns: tuple[syntax.SelectElement, ...]
    if "star" in selectors:
        columns = (syntax.Star(),)
    else:
        columns = tuple(_select_element(selector) for selector in selectors)

    return syntax.Select(
        distinct="distinct" in results,
        json="json" in results,
        table_name=_table_name(results["table_name"]),
        columns=columns,
        where_clause=tuple(_relation(rel) for rel in results.get("where", [])),
        order=(
            common.OrderClause(tuple(_ordering(o) for o in results["order"]))
            if "order" in results
            else None
        ),
        limit=results.get("limit"),
        filtering="filtering" in results,
    )
