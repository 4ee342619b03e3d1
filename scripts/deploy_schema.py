#!/usr/bin/env python
# ============================================================================
# SCHEMA DEPLOYMENT SCRIPT
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# PURPOSE: Deploy relapp schema to PostgreSQL using PydanticToSQL
# USAGE:
#   python scripts/deploy_schema.py --dry-run    # Preview SQL
#   python scripts/deploy_schema.py              # Execute deployment
# ============================================================================

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import psycopg

from core.logging import configure_logging
from core.schema import PydanticToSQL
from repositories.database import SCHEMA, get_connection_string, mask_connection_string


def main():
    parser = argparse.ArgumentParser(
        description="Deploy relapp schema to PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/deploy_schema.py --dry-run     # Preview DDL without executing
  python scripts/deploy_schema.py               # Deploy schema

Environment Variables:
  DATABASE_URL          Full PostgreSQL connection string
  POSTGRES_HOST         Database host (default: localhost)
  POSTGRES_DB           Database name (default: postgres)
  POSTGRES_USER         Database user (default: postgres)
  POSTGRES_PASSWORD     Database password
  POSTGRES_PORT         Database port (default: 5432)
  POSTGRES_SSLMODE      SSL mode (default: prefer)
  RELEASE_DB_SCHEMA     Target schema (default: relapp)
        """
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else "INFO")

    generator = PydanticToSQL(schema_name=SCHEMA)

    print("=" * 70)
    print("RELEASE RECONCILER - Schema Deployment")
    print("=" * 70)
    print(f"Schema: {SCHEMA}")
    print(f"Mode: {'DRY RUN' if args.dry_run else 'EXECUTE'}")
    print("=" * 70)

    if args.dry_run:
        statements = generator.generate_all()
        for i, stmt in enumerate(statements, 1):
            print(f"-- Statement {i}")
            print(stmt.as_string(None))
            print()
        print(f"{len(statements)} statements (not executed)")
        return

    conninfo = args.connection or get_connection_string()
    print(f"Target: {mask_connection_string(conninfo)}")

    try:
        with psycopg.connect(conninfo, autocommit=True) as conn:
            count = generator.execute(conn)
    except psycopg.Error as e:
        print(f"❌ Deployment failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 70)
    print(f"✅ Deployment completed successfully! ({count} statements)")
    print("=" * 70)


if __name__ == "__main__":
    main()
