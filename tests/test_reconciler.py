# ============================================================================
# RECONCILER AND EMITTER TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Tests - Read, diff, apply with mocked collaborators
# PURPOSE: Verify statement execution order, dry runs and fail-fast runs
# CREATED: 17 OCT 2026
# ============================================================================
"""
Reconciler and DDL Emitter Tests

The repository and catalog reader are MagicMocks; the differ and the
PostgresMeta are the real ones.

Run with:
    pytest tests/test_reconciler.py -v
"""

import pytest
from unittest.mock import MagicMock

import psycopg

from core.contracts import InvalidTypeError
from core.models.table import ColumnDefinition, ColumnTypeDescriptor, TableDefinition
from core.schema import operations as op
from core.schema.ddl_utils import PostgresMeta
from infrastructure.base_repository import EngineError, TableNotFoundError
from infrastructure.ddl_emitter import DDLEmitter
from infrastructure.postgresql import statement_text
from infrastructure.reconciler import SchemaReconciler


def col(name, kind, nullable=True, **kwargs):
    return ColumnDefinition(
        name=name,
        type=ColumnTypeDescriptor(kind=kind, nullable=nullable),
        **kwargs,
    )


def users_table(**kwargs):
    fields = dict(
        name="users",
        columns=[col("id", "int64", nullable=False), col("name", "string")],
        primary_key=["id"],
    )
    fields.update(kwargs)
    return TableDefinition(**fields)


CREATE_USERS = [
    'CREATE TABLE "users" ()',
    'ALTER TABLE "users" ADD COLUMN "id" bigint NOT NULL DEFAULT 0',
    'ALTER TABLE "users" ADD COLUMN "name" text',
    'ALTER TABLE "users" ADD PRIMARY KEY ("id")',
]


@pytest.fixture
def repo():
    repo = MagicMock(name="repo")
    repo.config.safe_description.return_value = "localhost:5432/test"
    return repo


@pytest.fixture
def reader():
    reader = MagicMock(name="reader")
    reader.read_table.side_effect = missing_table
    return reader


def missing_table(table):
    raise TableNotFoundError(table)


def executed(repo):
    return [statement_text(c.args[0]) for c in repo.execute.call_args_list]


# ============================================================================
# EMITTER
# ============================================================================


class TestDDLEmitter:
    def test_executes_in_order(self, repo):
        ops = [
            op.AddColumn("users", col("age", "int64")),
            op.SetColumnComment("users", "age", '{"unit":"years"}'),
        ]
        statements = DDLEmitter(repo, PostgresMeta()).apply(ops)
        assert statements == [
            'ALTER TABLE "users" ADD COLUMN "age" bigint',
            'COMMENT ON COLUMN "users"."age" IS \'{"unit":"years"}\'',
        ]
        assert executed(repo) == statements
        for c in repo.execute.call_args_list:
            assert len(c.args) == 1

    def test_dry_run_executes_nothing(self, repo):
        statements = DDLEmitter(repo, PostgresMeta()).apply([op.DropColumn("users", "age")], dry_run=True)
        assert statements == ['ALTER TABLE "users" DROP COLUMN "age"']
        repo.execute.assert_not_called()

    def test_stops_at_first_failure(self, repo):
        repo.execute.side_effect = [1, EngineError("ALTER ...", None, psycopg.Error("boom")), 1]
        ops = [
            op.DropColumn("users", "a"),
            op.DropColumn("users", "b"),
            op.DropColumn("users", "c"),
        ]
        with pytest.raises(EngineError):
            DDLEmitter(repo, PostgresMeta()).apply(ops)
        assert repo.execute.call_count == 2

    def test_render(self, repo):
        assert DDLEmitter(repo, PostgresMeta(schema="app")).render([op.CreateTable("t")]) == [
            'CREATE TABLE "app"."t" ()'
        ]

    def test_empty(self, repo):
        assert DDLEmitter(repo, PostgresMeta()).apply([]) == []
        repo.execute.assert_not_called()


# ============================================================================
# RECONCILER
# ============================================================================


class TestReconcile:
    def test_creates_missing_table(self, repo, reader):
        reconciler = SchemaReconciler(repo, PostgresMeta(), reader=reader)
        result = reconciler.reconcile(users_table())
        assert result.created
        assert result.changed
        assert result.statements == CREATE_USERS
        assert executed(repo) == CREATE_USERS

    def test_up_to_date(self, repo, reader):
        reader.read_table.side_effect = None
        reader.read_table.return_value = users_table(primary_key_constraint_name="users_pkey")
        result = SchemaReconciler(repo, PostgresMeta(), reader=reader).reconcile(users_table())
        assert not result.changed
        assert result.statements == []
        repo.execute.assert_not_called()

    def test_alters_existing_table(self, repo, reader):
        reader.read_table.side_effect = None
        reader.read_table.return_value = users_table(
            columns=[col("id", "int64", nullable=False), col("name", "string"), col("age", "int64")],
        )
        result = SchemaReconciler(repo, PostgresMeta(), reader=reader).reconcile(users_table())
        assert result.operations == [op.DropColumn("users", "age")]
        assert executed(repo) == ['ALTER TABLE "users" DROP COLUMN "age"']

    def test_dry_run(self, repo, reader):
        result = SchemaReconciler(repo, PostgresMeta(), reader=reader).reconcile(users_table(), dry_run=True)
        assert result.dry_run
        assert result.statements == CREATE_USERS
        repo.execute.assert_not_called()

    def test_plan_has_no_side_effects(self, repo, reader):
        ops = SchemaReconciler(repo, PostgresMeta(), reader=reader).plan(users_table())
        assert isinstance(ops[0], op.CreateTable)
        repo.execute.assert_not_called()

    def test_unknown_live_type_propagates(self, repo, reader):
        reader.read_table.side_effect = InvalidTypeError("integer")
        with pytest.raises(InvalidTypeError):
            SchemaReconciler(repo, PostgresMeta(), reader=reader).reconcile(users_table())
        repo.execute.assert_not_called()

    def test_default_reader_uses_meta_schema(self, repo):
        reconciler = SchemaReconciler(repo, PostgresMeta(schema="app"))
        assert reconciler.reader.schema_name == "app"


class TestReconcileAll:
    def test_success(self, repo, reader):
        reconciler = SchemaReconciler(repo, PostgresMeta(), reader=reader)
        report = reconciler.reconcile_all([users_table(), users_table(name="accounts")])
        assert report.success
        assert report.database == "localhost:5432/test"
        assert [s.status for s in report.steps] == ["success", "success"]
        assert report.steps[0].details["created"] is True
        assert report.to_dict()["summary"]["successful"] == 2
        assert repo.execute.call_count == 8

    def test_fail_fast(self, repo, reader):
        repo.execute.side_effect = [1, EngineError('ALTER TABLE "a"', None, psycopg.Error("boom"))]
        reconciler = SchemaReconciler(repo, PostgresMeta(), reader=reader)
        report = reconciler.reconcile_all([
            users_table(name="a"),
            users_table(name="b"),
            users_table(name="c"),
        ])
        assert not report.success
        assert [(s.name, s.status) for s in report.steps] == [
            ("a", "failed"),
            ("b", "skipped"),
            ("c", "skipped"),
        ]
        assert report.errors[0].startswith("a: ")
        assert repo.execute.call_count == 2
        summary = report.to_dict()["summary"]
        assert summary == {"total_steps": 3, "successful": 0, "failed": 1, "skipped": 2, "rolled_back": 0}

    def test_atomic_uses_one_transaction(self, repo, reader):
        reconciler = SchemaReconciler(repo, PostgresMeta(), reader=reader)
        report = reconciler.reconcile_all([users_table()], atomic=True)
        assert report.success
        repo.transaction.assert_called_once_with()

    def test_atomic_failure_rolls_back_earlier_tables(self, repo, reader):
        repo.execute.side_effect = [1, 1, 1, 1, EngineError('CREATE TABLE "b"', None, psycopg.Error("boom"))]
        reconciler = SchemaReconciler(repo, PostgresMeta(), reader=reader)
        report = reconciler.reconcile_all(
            [users_table(name="a"), users_table(name="b"), users_table(name="c")],
            atomic=True,
        )
        assert not report.success
        assert [(s.name, s.status) for s in report.steps] == [
            ("a", "rolled_back"),
            ("b", "failed"),
            ("c", "skipped"),
        ]
        assert report.errors == [f"b: {report.steps[1].error}"]
        summary = report.to_dict()["summary"]
        assert summary["rolled_back"] == 1
        assert summary["successful"] == 0

    def test_commit_failure_reported(self, repo, reader):
        repo.transaction.return_value.__exit__.side_effect = EngineError("COMMIT", None, psycopg.Error("boom"))
        reconciler = SchemaReconciler(repo, PostgresMeta(), reader=reader)
        report = reconciler.reconcile_all([users_table()], atomic=True)
        assert not report.success
        assert [(s.name, s.status) for s in report.steps] == [("users", "rolled_back")]
        assert len(report.errors) == 1
        assert report.errors[0].startswith("commit: ")

    def test_dry_run_never_opens_transaction(self, repo, reader):
        reconciler = SchemaReconciler(repo, PostgresMeta(), reader=reader)
        report = reconciler.reconcile_all([users_table()], dry_run=True, atomic=True)
        assert report.success
        assert "[DRY RUN]" in report.steps[0].message
        repo.transaction.assert_not_called()
        repo.execute.assert_not_called()
