import pytest

from moviechat.sql_firewall import sanitize_input, validate_sql


@pytest.mark.parametrize(
    "sql, pattern",
    [
        ("DROP TABLE movies", "DROP TABLE"),
        ("drop table movies", "DROP TABLE"),
        ("SELECT 1; drop database prod", "DROP DATABASE"),
        ("Truncate movies", "TRUNCATE"),
        ("alter table movies add column x int", "ALTER TABLE"),
        ("create table t (id int)", "CREATE TABLE"),
        ("CREATE DATABASE other", "CREATE DATABASE"),
        ("grant all on movies to bob", "GRANT"),
        ("revoke select on movies from bob", "REVOKE"),
    ],
)
def test_dangerous_operations_rejected_regardless_of_case(sql, pattern):
    outcome = validate_sql(sql)
    assert not outcome.is_valid
    assert outcome.error == f"Dangerous operation detected: {pattern}"


def test_first_dangerous_pattern_wins():
    outcome = validate_sql("TRUNCATE movies; DROP TABLE movies")
    assert outcome.error == "Dangerous operation detected: DROP TABLE"


@pytest.mark.parametrize("sql", ["EXPLAIN SELECT 1", "WITH t AS (SELECT 1) SELECT * FROM t", "SHOW TABLES"])
def test_statements_must_start_with_allowed_verb(sql):
    outcome = validate_sql(sql)
    assert not outcome.is_valid
    assert outcome.error == "Query must start with SELECT, INSERT, UPDATE, or DELETE"


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT 1; DELETE FROM movies",
        "SELECT * FROM movies;\n  update movies SET rating = 1",
        "SELECT title FROM movies UNION ALL SELECT current_user",
        "SELECT * FROM movies WHERE year > 2000 -- trailing comment",
        "SELECT * FROM movies WHERE title = 'a--b'",
    ],
)
def test_injection_heuristics_reject(sql):
    outcome = validate_sql(sql)
    assert not outcome.is_valid
    assert outcome.error == "Potentially malicious SQL detected"


def test_stacked_drop_is_rejected():
    assert not validate_sql("SELECT 1; DROP TABLE movies").is_valid


@pytest.mark.parametrize("sql", [None, "", 42, ["SELECT 1"]])
def test_empty_or_non_string_rejected(sql):
    outcome = validate_sql(sql)
    assert not outcome.is_valid
    assert outcome.error == "Query is empty or not a string"


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT * FROM movies WHERE genre ILIKE '%action%' AND year > 2010;",
        "  select genre, AVG(rating) FROM movies GROUP BY genre",
        "INSERT INTO movies (title, year) VALUES ('RRR', 2022);",
        "UPDATE movies SET rating = 9.0 WHERE title = 'RRR';",
        "DELETE FROM movies WHERE year < 2000;",
    ],
)
def test_ordinary_statements_pass(sql):
    outcome = validate_sql(sql)
    assert outcome.is_valid
    assert outcome.error is None


def test_sanitize_strips_brackets_and_quotes():
    assert sanitize_input("<b>O'Brien</b>") == "bOBrien/b"
    assert sanitize_input('  say "hi"  ') == "say hi"


@pytest.mark.parametrize("text", ["<b>O'Brien</b>", " plain text ", "'\"<>'", ""])
def test_sanitize_is_idempotent(text):
    once = sanitize_input(text)
    assert sanitize_input(once) == once


def test_sanitize_passes_non_strings_through():
    assert sanitize_input(None) is None
