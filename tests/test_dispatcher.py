"""
Tests for sqlitectl.dispatcher — named operations and their envelopes.

Invariants tested:
- D1: read_query rejects non-SELECT statements and executes nothing
- D2: write_query rejects SELECT statements and executes nothing
- D3: create_table rejects anything but CREATE TABLE, executes exactly once
- D4: Store faults become is_error=True results, never exceptions
- D5: append_insight grows the ledger by exactly one; memo reads are stable
- End-to-end scenarios over a real SQLite file
"""

import json

import pytest

from sqlitectl.dispatcher import (
    CREATE_ONLY_MESSAGE,
    INSIGHT_ADDED,
    NO_SELECT_MESSAGE,
    READ_ONLY_MESSAGE,
    OperationDispatcher,
)
from sqlitectl.executor import QueryExecutor
from sqlitectl.insights import EMPTY_MEMO, InsightLedger


class CountingExecutor(QueryExecutor):
    """QueryExecutor that records every statement it runs."""

    def __init__(self, db_path):
        super().__init__(db_path)
        self.statements = []

    def execute(self, statement, params=None):
        self.statements.append(statement)
        return super().execute(statement, params)


@pytest.fixture
def executor(tmp_path):
    ex = CountingExecutor(tmp_path / "test.db")
    ex.ensure_store()
    return ex


@pytest.fixture
def dispatcher(executor):
    return OperationDispatcher(executor)


@pytest.fixture
def with_table(dispatcher, executor):
    """Dispatcher with table t(id, name) created; statement log cleared."""
    result = dispatcher.create_table("CREATE TABLE t (id INTEGER, name TEXT)")
    assert not result.is_error
    executor.statements.clear()
    return dispatcher


# ── D1: read_query ──────────────────────────────────────────────────

class TestReadQuery:
    def test_select_returns_json_rows(self, with_table):
        with_table.write_query("INSERT INTO t VALUES (1, 'a')")
        result = with_table.read_query("SELECT * FROM t")
        assert not result.is_error
        assert json.loads(result.content) == [{"id": 1, "name": "a"}]

    @pytest.mark.parametrize("sql", [
        "INSERT INTO t VALUES (2, 'b')",
        "DELETE FROM t",
        "CREATE TABLE x (a)",
        "PRAGMA table_info(t)",
    ])
    def test_non_select_rejected(self, with_table, executor, sql):
        result = with_table.read_query(sql)
        assert result.is_error
        assert result.content == READ_ONLY_MESSAGE
        assert executor.statements == []

    def test_execution_fault_is_error(self, dispatcher):
        result = dispatcher.read_query("SELECT * FROM missing")
        assert result.is_error
        assert "no such table" in result.content

    def test_infinite_real_is_null(self, dispatcher):
        result = dispatcher.read_query("SELECT 1e999 AS x")
        assert not result.is_error
        assert result.content == '[{"x":null}]'


# ── D2: write_query ─────────────────────────────────────────────────

class TestWriteQuery:
    def test_insert_ok(self, with_table):
        result = with_table.write_query("INSERT INTO t VALUES (1, 'a')")
        assert not result.is_error
        assert json.loads(result.content) == []

    def test_select_rejected(self, with_table, executor):
        result = with_table.write_query("  select * from t")
        assert result.is_error
        assert result.content == NO_SELECT_MESSAGE
        assert executor.statements == []

    def test_other_statements_accepted(self, with_table):
        """Non-SELECT text reaches the store; SQLite decides validity."""
        assert not with_table.write_query("DROP TABLE t").is_error
        assert json.loads(with_table.list_tables().content) == []

    def test_store_rejects_garbage(self, with_table, executor):
        result = with_table.write_query("this is not sql")
        assert result.is_error
        assert result.content.startswith("Error executing query:")
        assert executor.statements == ["this is not sql"]

    def test_constraint_violation(self, dispatcher):
        dispatcher.create_table("CREATE TABLE u (id INTEGER PRIMARY KEY)")
        dispatcher.write_query("INSERT INTO u VALUES (1)")
        result = dispatcher.write_query("INSERT INTO u VALUES (1)")
        assert result.is_error
        assert "UNIQUE" in result.content


# ── D3: create_table ────────────────────────────────────────────────

class TestCreateTable:
    def test_executes_exactly_once(self, dispatcher, executor):
        sql = "CREATE TABLE t (id INTEGER, name TEXT)"
        result = dispatcher.create_table(sql)
        assert not result.is_error
        assert result.content == f"Table created successfully: {sql}"
        assert executor.statements == [sql]

    @pytest.mark.parametrize("sql", [
        "SELECT 1",
        "INSERT INTO t VALUES (1)",
        "CREATE INDEX i ON t(a)",
        "DROP TABLE t",
    ])
    def test_rejects_non_create(self, dispatcher, executor, sql):
        result = dispatcher.create_table(sql)
        assert result.is_error
        assert result.content == CREATE_ONLY_MESSAGE
        assert executor.statements == []

    def test_duplicate_table_is_error(self, with_table):
        result = with_table.create_table("CREATE TABLE t (x)")
        assert result.is_error
        assert result.content.startswith("Error creating table:")
        assert "already exists" in result.content


# ── list_tables / describe_table ────────────────────────────────────

class TestSchema:
    def test_list_tables_empty(self, dispatcher):
        result = dispatcher.list_tables()
        assert not result.is_error
        assert json.loads(result.content) == []

    def test_list_tables(self, with_table):
        with_table.create_table("CREATE TABLE u (a)")
        names = {r["name"] for r in json.loads(with_table.list_tables().content)}
        assert names == {"t", "u"}

    def test_describe_table(self, with_table):
        result = with_table.describe_table("t")
        assert not result.is_error
        cols = json.loads(result.content)
        assert [c["name"] for c in cols] == ["id", "name"]
        assert [c["type"] for c in cols] == ["INTEGER", "TEXT"]

    def test_describe_unknown_table_is_empty(self, dispatcher):
        result = dispatcher.describe_table("nope")
        assert not result.is_error
        assert json.loads(result.content) == []

    def test_describe_malformed_name_is_error(self, dispatcher):
        result = dispatcher.describe_table("t)); DROP TABLE t; --")
        assert result.is_error
        assert result.content.startswith("Error describing table:")

    def test_list_tables_fault_is_error(self, tmp_path):
        """A store path that cannot be opened yields an error result."""
        ex = QueryExecutor(tmp_path / "no-such-dir" / "db.sqlite")
        result = OperationDispatcher(ex).list_tables()
        assert result.is_error
        assert result.content.startswith("Error listing tables:")


# ── D5: insights ────────────────────────────────────────────────────

class TestInsights:
    def test_append_acknowledged(self, dispatcher):
        result = dispatcher.append_insight("Sales grew 20%")
        assert not result.is_error
        assert result.content == INSIGHT_ADDED
        assert dispatcher.ledger.snapshot() == ("Sales grew 20%",)

    def test_append_touches_no_store(self, dispatcher, executor):
        dispatcher.append_insight("x")
        assert executor.statements == []

    def test_append_does_not_synthesize(self, dispatcher, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "sqlitectl.dispatcher.synthesize_memo",
            lambda insights: calls.append(insights) or "",
        )
        dispatcher.append_insight("x")
        assert calls == []
        dispatcher.read_memo()
        assert calls == [("x",)]

    def test_monotonic_growth(self, with_table):
        sizes = [len(with_table.ledger)]
        with_table.append_insight("a")
        sizes.append(len(with_table.ledger))
        with_table.read_query("SELECT * FROM t")
        sizes.append(len(with_table.ledger))
        with_table.append_insight("b")
        sizes.append(len(with_table.ledger))
        assert sizes == [0, 1, 1, 2]

    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    def test_blank_insight_rejected(self, dispatcher, text):
        result = dispatcher.append_insight(text)
        assert result.is_error
        assert len(dispatcher.ledger) == 0

    def test_memo_empty(self, dispatcher):
        assert dispatcher.read_memo() == EMPTY_MEMO

    def test_memo_read_is_stable(self, dispatcher):
        dispatcher.append_insight("a")
        dispatcher.append_insight("b")
        assert dispatcher.read_memo() == dispatcher.read_memo()

    def test_dispatchers_do_not_share_ledgers(self, executor):
        a = OperationDispatcher(executor)
        b = OperationDispatcher(executor)
        a.append_insight("only a")
        assert b.read_memo() == EMPTY_MEMO

    def test_injected_ledger_is_used(self, executor):
        ledger = InsightLedger()
        d = OperationDispatcher(executor, ledger=ledger)
        d.append_insight("x")
        assert ledger.snapshot() == ("x",)


# ── End-to-end scenarios ────────────────────────────────────────────

class TestScenarios:
    def test_create_list_describe(self, dispatcher):
        assert not dispatcher.create_table(
            "CREATE TABLE t (id INTEGER, name TEXT)"
        ).is_error
        tables = json.loads(dispatcher.list_tables().content)
        assert {"name": "t"} in tables
        cols = json.loads(dispatcher.describe_table("t").content)
        assert [c["name"] for c in cols] == ["id", "name"]

    def test_write_then_read(self, with_table):
        assert not with_table.write_query("INSERT INTO t VALUES (1,'a')").is_error
        rows = json.loads(with_table.read_query("SELECT * FROM t").content)
        assert rows == [{"id": 1, "name": "a"}]

    def test_read_rejects_insert(self, with_table):
        result = with_table.read_query("INSERT INTO t VALUES (2,'b')")
        assert result.is_error
        assert json.loads(with_table.read_query("SELECT * FROM t").content) == []

    def test_insights_memo(self, dispatcher):
        dispatcher.append_insight("Sales grew 20%")
        dispatcher.append_insight("Churn dropped")
        memo = dispatcher.read_memo()
        assert memo.index("- Sales grew 20%") < memo.index("- Churn dropped")
        assert "2 key business insights" in memo
