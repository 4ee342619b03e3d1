# ============================================================================
# DDL UTILITIES
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Shared DDL fragments
# PURPOSE: Index, trigger, comment and schema statements via psycopg.sql
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: IndexBuilder, TriggerBuilder, CommentBuilder, SchemaUtils
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL Utilities

Every builder returns psycopg.sql.Composed; identifiers are always quoted
through sql.Identifier and comment text through sql.Literal. Every
statement is safe to run twice.

Usage:
    from core.schema.ddl_utils import IndexBuilder

    stmt = IndexBuilder.btree("relapp", "releases", ["package_name", "state"])
    cur.execute(stmt)
"""

from typing import List, Optional, Sequence, Union

from psycopg import sql

Columns = Union[str, Sequence[str]]

UPDATED_AT_FUNCTION = "update_updated_at_column"


def _qualified(schema: str, name: str) -> sql.Composed:
    """schema.name with both parts quoted."""
    return sql.SQL(".").join([sql.Identifier(schema), sql.Identifier(name)])


class IndexBuilder:
    """CREATE INDEX statements."""

    @staticmethod
    def default_name(table: str, columns: Columns, descending: bool = False) -> str:
        cols = [columns] if isinstance(columns, str) else list(columns)
        return "_".join(["idx", table, *cols] + (["desc"] if descending else []))

    @staticmethod
    def btree(
        schema: str,
        table: str,
        columns: Columns,
        name: Optional[str] = None,
        descending: bool = False,
        partial_where: Optional[str] = None,
    ) -> sql.Composed:
        """
        B-tree index on one or more columns.

        partial_where is trusted SQL taken from model metadata, never from
        user input.
        """
        cols = [columns] if isinstance(columns, str) else list(columns)
        order = sql.SQL(" DESC") if descending else sql.SQL("")
        column_list = sql.SQL(", ").join(
            sql.Composed([sql.Identifier(c), order]) for c in cols
        )

        parts = [
            sql.SQL("CREATE INDEX IF NOT EXISTS {} ON {} ({})").format(
                sql.Identifier(name or IndexBuilder.default_name(table, cols, descending)),
                _qualified(schema, table),
                column_list,
            )
        ]
        if partial_where:
            parts.append(sql.SQL(" WHERE {}").format(sql.SQL(partial_where)))
        return sql.Composed(parts)


class TriggerBuilder:
    """Trigger keeping updated_at current on every UPDATE."""

    @staticmethod
    def updated_at_function(schema: str) -> sql.Composed:
        return sql.SQL(
            "CREATE OR REPLACE FUNCTION {}() RETURNS TRIGGER LANGUAGE plpgsql AS $$ "
            "BEGIN NEW.updated_at = NOW(); RETURN NEW; END; $$"
        ).format(_qualified(schema, UPDATED_AT_FUNCTION))

    @staticmethod
    def updated_at_trigger(
        schema: str,
        table: str,
        trigger_name: Optional[str] = None,
    ) -> List[sql.Composed]:
        """DROP then CREATE, so redeploys replace the trigger."""
        trigger = sql.Identifier(trigger_name or f"trg_{table}_updated_at")
        target = _qualified(schema, table)
        return [
            sql.SQL("DROP TRIGGER IF EXISTS {} ON {}").format(trigger, target),
            sql.SQL(
                "CREATE TRIGGER {} BEFORE UPDATE ON {} "
                "FOR EACH ROW EXECUTE FUNCTION {}()"
            ).format(trigger, target, _qualified(schema, UPDATED_AT_FUNCTION)),
        ]


class CommentBuilder:
    """COMMENT ON statements."""

    @staticmethod
    def table(schema: str, table: str, comment: str) -> sql.Composed:
        return sql.SQL("COMMENT ON TABLE {} IS {}").format(
            _qualified(schema, table), sql.Literal(comment)
        )

    @staticmethod
    def column(schema: str, table: str, column: str, comment: str) -> sql.Composed:
        return sql.SQL("COMMENT ON COLUMN {}.{} IS {}").format(
            _qualified(schema, table), sql.Identifier(column), sql.Literal(comment)
        )


class SchemaUtils:
    """Schema-level statements."""

    @staticmethod
    def create_schema(schema: str) -> sql.Composed:
        return sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema))

    @staticmethod
    def set_search_path(schema: str, include_public: bool = True) -> sql.Composed:
        path = [sql.Identifier(schema)]
        if include_public:
            path.append(sql.SQL("public"))
        return sql.SQL("SET search_path TO {}").format(sql.SQL(", ").join(path))


__all__ = [
    "IndexBuilder",
    "TriggerBuilder",
    "CommentBuilder",
    "SchemaUtils",
]
