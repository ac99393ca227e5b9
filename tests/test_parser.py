import pyparsing
import pytest

from cqlselect import common, parser, syntax


def test_parser() -> None:
    success, _ = parser.SELECT_STMT.run_tests(
        """\
        SELECT * FROM t

        # keyspace qualified table
        select * from ks.t

        Select distinct json a, b from t

        # aliases and function calls
        SELECT a AS b, count(*) FROM t WHERE x = 1 ALLOW FILTERING

        # nested function calls
        SELECT token(k), writetime(v), blob_as_text(int_as_blob(1)) FROM t

        # compound where clause
        SELECT a FROM t WHERE k IN (1, 2, 3) AND m CONTAINS KEY 'x' AND v >= ?

        # ordering and limit
        SELECT "Quoted Name" FROM t ORDER BY c DESC, d LIMIT 10

        # trailing semicolon and comment
        SELECT * FROM t; -- everything
        """
    )
    assert success


def test_parser_failures() -> None:
    success, _ = parser.SELECT_STMT.run_tests(
        """\
        # invalid SELECT keyword
        SELEC * FROM t

        # missing projection
        SELECT FROM t

        # incomplete statement
        SELECT * FROM

        # dangling comma
        SELECT a, FROM t

        # missing limit value
        SELECT a FROM t LIMIT

        # incomplete filtering flag
        SELECT a FROM t ALLOW

        # AND without a relation
        SELECT a FROM t WHERE x = 1 AND
        """,
        failure_tests=True,
    )
    assert success


def test_parse_function_simple_select() -> None:
    assert parser.parse("SELECT * FROM foo") == syntax.Select(
        table_name=common.FQName(common.Identifier("foo")),
        columns=(syntax.Star(),),
    )


def test_parse_function_full_select() -> None:
    select = parser.parse(
        "select distinct json a as b, count(*), c from ks.t"
        " where x = 1 and y in ('p', 'q') order by c desc limit 5 allow filtering"
    )
    assert select == syntax.Select(
        distinct=True,
        json=True,
        table_name=common.FQName(common.Identifier("t"), common.Identifier("ks")),
        columns=(
            syntax.Column(
                syntax.Named(name=common.Identifier("a"), alias=common.Identifier("b"))
            ),
            syntax.Function(syntax.Named(name=common.Identifier("count(*)"))),
            syntax.Column(syntax.Named(name=common.Identifier("c"))),
        ),
        where_clause=(
            common.Relation(common.Identifier("x"), "=", "1"),
            common.Relation(common.Identifier("y"), "IN", "('p', 'q')"),
        ),
        order=common.OrderClause(
            (common.Ordering(common.Identifier("c"), descending=True),)
        ),
        limit=5,
        filtering=True,
    )
    assert select.select_names() == ["a", "c"]
    assert select.select_alias() == [common.Identifier("b"), common.Identifier("c")]


@pytest.mark.parametrize(
    "text",
    [
        "SELECT * FROM t",
        "SELECT DISTINCT a FROM t LIMIT 5",
        "SELECT a AS b, count(*) FROM t WHERE x = 1 ALLOW FILTERING",
        "SELECT JSON a, writetime(b) AS wt FROM ks.t WHERE a IN (1, 2) AND b > 'x'"
        " ORDER BY c DESC, d ASC LIMIT -1 ALLOW FILTERING",
        'SELECT "Mixed Case" AS "Other""Name" FROM "KS".t WHERE m CONTAINS KEY :k',
        "SELECT json FROM t",
        "SELECT distinct FROM t",
        "SELECT DISTINCT json FROM t",
        "SELECT JSON distinct, json FROM t",
        "SELECT DISTINCT JSON json FROM t",
    ],
)
def test_canonical_text_roundtrips(text: str) -> None:
    select = parser.parse(text)
    assert str(select) == text
    assert parser.parse(str(select)) == select


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("select a from t where x=1 limit 5", "SELECT a FROM t WHERE x = 1 LIMIT 5"),
        ("SELECT count( * ) FROM t", "SELECT count(*) FROM t"),
        ("SELECT a FROM t ORDER BY a", "SELECT a FROM t ORDER BY a ASC"),
        (
            "SELECT a FROM t WHERE b in (1,2) and c contains 3",
            "SELECT a FROM t WHERE b IN (1, 2) AND c CONTAINS 3",
        ),
        ("SELECT a FROM t WHERE b = TRUE;", "SELECT a FROM t WHERE b = true"),
    ],
)
def test_parse_renders_canonical_form(text: str, expected: str) -> None:
    assert str(parser.parse(text)) == expected


def test_parse_keeps_identifier_spans_for_errors() -> None:
    with pytest.raises(common.InvalidIdentifier) as excinfo:
        parser.parse("SELECT select(a) FROM t")
    assert excinfo.value.text == "select(a)"
    assert excinfo.value.span == common.Span(7, 16)


def test_parse_syntax_error() -> None:
    with pytest.raises(pyparsing.ParseException):
        parser.parse("SELECT * FROM t WHERE")


def test_flag_words_as_column_names() -> None:
    select = syntax.Select(
        distinct=True,
        table_name=common.FQName(common.Identifier("t")),
        columns=(
            syntax.Column(syntax.Named.simple("json", common.Span.of("json"))),
            syntax.Column(syntax.Named.simple("distinct", common.Span.of("distinct"))),
        ),
    )
    assert str(select) == "SELECT DISTINCT json, distinct FROM t"
    assert parser.parse(str(select)) == select
    assert parser.parse("SELECT json FROM t").select_names() == ["json"]
    assert not parser.parse("SELECT json FROM t").json
