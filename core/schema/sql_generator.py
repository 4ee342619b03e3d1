# ============================================================================
# PYDANTIC TO SQL GENERATOR
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - DDL generation from Pydantic models
# PURPOSE: Generate PostgreSQL CREATE statements from the persisted models
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PydanticToSQL
# DEPENDENCIES: pydantic, psycopg
# ============================================================================
"""
Pydantic to PostgreSQL Schema Generator.

Release, PackageExtra and BuildJob are the single source of truth for the
release store schema. Each declares its table through ClassVar metadata:

    __sql_table__        table name
    __sql_schema__       schema name
    __sql_primary_key__  column or list of columns
    __sql_indexes__      (name, columns) or (name, columns, partial_where)

Column types:
    str with max_length      VARCHAR(n)
    str enums                schema-qualified ENUM (release_state, ...)
    IntEnum                  INTEGER code (releases.reason)
    dict / list              JSONB
    datetime                 TIMESTAMPTZ

Usage:
    generator = PydanticToSQL(schema_name="relapp")
    for stmt in generator.generate_all():
        cursor.execute(stmt)
"""

import logging
import re
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Type, Union, get_args, get_origin

from annotated_types import MaxLen
from psycopg import sql
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from core.schema.ddl_utils import CommentBuilder, IndexBuilder, SchemaUtils, TriggerBuilder

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMNS = ("created_at", "updated_at")


def _unwrap_optional(annotation: Any) -> Any:
    """Optional[X] -> X; anything else unchanged."""
    if get_origin(annotation) is Union:
        args = [a for a in get_args(annotation) if a is not type(None)]
        return args[0] if args else str
    return annotation


def _is_nullable(annotation: Any) -> bool:
    return get_origin(annotation) is Union and type(None) in get_args(annotation)


class PydanticToSQL:
    """Build CREATE TYPE / TABLE / INDEX statements from persisted models."""

    SCALAR_TYPES = {
        int: "INTEGER",
        float: "DOUBLE PRECISION",
        bool: "BOOLEAN",
        datetime: "TIMESTAMPTZ",
    }

    def __init__(self, schema_name: str = "relapp"):
        self.schema_name = schema_name
        self.enums: Dict[str, Type[Enum]] = {}

    # =========================================================================
    # METADATA
    # =========================================================================

    @staticmethod
    def get_model_metadata(model: Type[BaseModel]) -> Dict[str, Any]:
        """Table metadata declared on a model, with defaults filled in."""
        primary_key = getattr(model, "__sql_primary_key__", [])
        if isinstance(primary_key, str):
            primary_key = [primary_key]
        return {
            "table": getattr(model, "__sql_table__", None),
            "schema": getattr(model, "__sql_schema__", "relapp"),
            "primary_key": list(primary_key),
            "indexes": list(getattr(model, "__sql_indexes__", [])),
        }

    @staticmethod
    def enum_type_name(enum_class: Type[Enum]) -> str:
        """ReleaseState -> release_state."""
        return re.sub(r"(?<!^)(?=[A-Z])", "_", enum_class.__name__).lower()

    # =========================================================================
    # TYPES
    # =========================================================================

    def python_type_to_sql(self, field_type: Any, field_info: FieldInfo) -> str:
        """
        PostgreSQL type name for a field annotation.

        Str enums are registered in self.enums and returned by type name.
        """
        actual = _unwrap_optional(field_type)

        if get_origin(actual) in (dict, list) or actual in (dict, list):
            return "JSONB"

        if actual is str:
            max_lengths = [m.max_length for m in field_info.metadata if isinstance(m, MaxLen)]
            return f"VARCHAR({max_lengths[0]})" if max_lengths else "VARCHAR"

        if isinstance(actual, type) and issubclass(actual, IntEnum):
            return "INTEGER"

        if isinstance(actual, type) and issubclass(actual, Enum):
            name = self.enum_type_name(actual)
            self.enums[name] = actual
            return name

        return self.SCALAR_TYPES.get(actual, "JSONB")

    def generate_enum(self, enum_class: Type[Enum], schema: str) -> sql.Composed:
        """
        CREATE TYPE ... AS ENUM, skipped when the type already exists.

        The type is never dropped, so redeploying keeps dependent columns.
        """
        type_name = self.enum_type_name(enum_class)
        create = sql.SQL("CREATE TYPE {} AS ENUM ({})").format(
            sql.Identifier(schema, type_name),
            sql.SQL(", ").join(sql.Literal(member.value) for member in enum_class),
        )
        return sql.SQL(
            "DO $$ BEGIN {create}; "
            "EXCEPTION WHEN duplicate_object THEN NULL; END $$"
        ).format(create=create)

    # =========================================================================
    # TABLES
    # =========================================================================

    def _column_default(
        self,
        field_name: str,
        field_info: FieldInfo,
        sql_type: str,
        schema_name: str,
    ) -> Optional[sql.Composable]:
        if field_info.is_required():
            return None

        if field_info.default_factory is not None:
            if field_name in TIMESTAMP_COLUMNS:
                return sql.SQL("NOW()")
            if sql_type == "JSONB":
                empty = "[]" if isinstance(field_info.default_factory(), list) else "{}"
                return sql.Literal(empty)
            return None

        default = field_info.default
        if default is None:
            return None
        if isinstance(default, IntEnum):
            return sql.Literal(int(default))
        if isinstance(default, Enum):
            return sql.SQL("{}::{}").format(
                sql.Literal(default.value), sql.Identifier(schema_name, sql_type)
            )
        if isinstance(default, (bool, str, int, float)):
            return sql.Literal(default)
        return None

    def column_definition(
        self,
        field_name: str,
        field_info: FieldInfo,
        schema_name: str,
        primary_key: List[str],
    ) -> sql.Composed:
        """'"name" TYPE [NOT NULL] [DEFAULT ...]' for one model field."""
        sql_type = self.python_type_to_sql(field_info.annotation, field_info)
        type_sql = (
            sql.Identifier(schema_name, sql_type)
            if sql_type in self.enums
            else sql.SQL(sql_type)
        )

        parts = [sql.Identifier(field_name), type_sql]
        if not _is_nullable(field_info.annotation) and field_name not in primary_key:
            parts.append(sql.SQL("NOT NULL"))

        default = self._column_default(field_name, field_info, sql_type, schema_name)
        if default is not None:
            parts.append(sql.SQL("DEFAULT {}").format(default))

        return sql.SQL(" ").join(parts)

    def generate_table(self, model: Type[BaseModel]) -> sql.Composed:
        """
        CREATE TABLE IF NOT EXISTS for a model.

        Raises:
            ValueError: Model declares no __sql_table__
        """
        meta = self.get_model_metadata(model)
        if not meta["table"]:
            raise ValueError(f"Model {model.__name__} missing __sql_table__ attribute")

        logger.debug(f"Generating table {meta['schema']}.{meta['table']} from {model.__name__}")

        elements = [
            self.column_definition(name, info, meta["schema"], meta["primary_key"])
            for name, info in model.model_fields.items()
        ]
        if meta["primary_key"]:
            elements.append(sql.SQL("PRIMARY KEY ({})").format(
                sql.SQL(", ").join(sql.Identifier(c) for c in meta["primary_key"])
            ))

        return sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
            sql.Identifier(meta["schema"], meta["table"]),
            sql.SQL(", ").join(elements),
        )

    def generate_indexes(self, model: Type[BaseModel]) -> List[sql.Composed]:
        """CREATE INDEX statements for a model's __sql_indexes__."""
        meta = self.get_model_metadata(model)
        statements = []
        for name, columns, *rest in meta["indexes"]:
            statements.append(IndexBuilder.btree(
                meta["schema"], meta["table"], columns,
                name=name,
                partial_where=rest[0] if rest else None,
            ))
        return statements

    # =========================================================================
    # COMPLETE SCHEMA
    # =========================================================================

    def generate_all(self) -> List[sql.Composed]:
        """
        Complete DDL for releases, package extras and build jobs, in
        execution order.
        """
        from core.contracts import BuildJobStatus, ReleaseState
        from core.models import BuildJob, PackageExtra, Release

        models = [Release, PackageExtra, BuildJob]
        statements = [
            SchemaUtils.create_schema(self.schema_name),
            SchemaUtils.set_search_path(self.schema_name),
            self.generate_enum(ReleaseState, self.schema_name),
            self.generate_enum(BuildJobStatus, self.schema_name),
        ]

        statements.extend(self.generate_table(model) for model in models)
        for model in models:
            statements.extend(self.generate_indexes(model))

        statements.append(CommentBuilder.table(
            self.schema_name, "package_extras",
            "Diagnostics only; overwritten by every reconciliation run",
        ))
        statements.append(CommentBuilder.column(
            self.schema_name, "releases", "reason",
            "ReleaseReason code; 0 means no failure recorded",
        ))

        statements.append(TriggerBuilder.updated_at_function(self.schema_name))
        for model in models:
            statements.extend(TriggerBuilder.updated_at_trigger(
                self.schema_name, self.get_model_metadata(model)["table"]
            ))

        logger.info(f"Generated {len(statements)} DDL statements for schema {self.schema_name}")
        return statements

    def execute(self, conn, dry_run: bool = False) -> int:
        """
        Run generate_all() on a sync psycopg connection.

        Returns:
            Number of statements executed (or logged, on a dry run)
        """
        statements = self.generate_all()

        if dry_run:
            for stmt in statements:
                logger.info(f"[DRY RUN] {stmt.as_string(conn)[:100]}...")
            return len(statements)

        with conn.cursor() as cur:
            for stmt in statements:
                cur.execute(stmt)

        logger.info(f"Executed {len(statements)} DDL statements")
        return len(statements)


__all__ = ["PydanticToSQL"]
