#!/usr/bin/env python
# ============================================================================
# SCHEMA RECONCILIATION SCRIPT
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# PURPOSE: Converge live PostgreSQL tables to YAML table definitions
# USAGE:
#   python scripts/reconcile_schema.py tables.yaml --dry-run   # Preview SQL
#   python scripts/reconcile_schema.py tables.yaml             # Apply
#   python scripts/reconcile_schema.py tables.yaml --table users
# ============================================================================

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from __version__ import __version__
from core.config import get_defaults
from core.logging import configure_logging
from core.schema.ddl_utils import PostgresMeta
from core.schema.definition_file import load_definitions
from infrastructure.postgresql import PostgreSQLRepository
from infrastructure.reconciler import SchemaReconciler


def main():
    parser = argparse.ArgumentParser(
        description="Reconcile PostgreSQL tables with YAML table definitions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/reconcile_schema.py tables.yaml --dry-run   # Preview DDL
  python scripts/reconcile_schema.py tables.yaml             # Apply changes
  python scripts/reconcile_schema.py tables.yaml --atomic    # One transaction

Environment Variables:
  DATABASE_URL          Full PostgreSQL connection string
  POSTGRES_HOST         Database host (default: localhost)
  POSTGRES_DB           Database name (default: postgres)
  POSTGRES_USER         Database user (default: postgres)
  POSTGRES_PASSWORD     Database password
  POSTGRES_PORT         Database port (default: 5432)
  POSTGRES_SSLMODE      SSL mode (default: prefer)
  POSTGRES_SCHEMA       Target schema (default: current_schema())
  RECONCILE_DRY_RUN     Default for --dry-run
  LOG_FORMAT            "json" for structured log output
        """
    )
    parser.add_argument(
        "definitions",
        help="YAML file with table definitions"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing"
    )
    parser.add_argument(
        "--table",
        action="append",
        help="Only reconcile this table (repeatable)"
    )
    parser.add_argument(
        "--schema",
        type=str,
        help="Target schema (overrides environment)"
    )
    parser.add_argument(
        "--atomic",
        action="store_true",
        help="Apply all tables in one transaction"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    args = parser.parse_args()

    configure_logging(level="DEBUG" if args.verbose else "INFO")

    defaults = get_defaults()
    dry_run = args.dry_run or defaults.reconcile.dry_run

    definitions = load_definitions(args.definitions)
    if args.table:
        wanted = set(args.table)
        unknown = wanted - {d.name for d in definitions}
        if unknown:
            print(f"Unknown table(s): {', '.join(sorted(unknown))}")
            sys.exit(2)
        definitions = [d for d in definitions if d.name in wanted]

    repo = PostgreSQLRepository(
        connection_string=args.connection,
        schema_name=args.schema,
        config=defaults.database,
    )
    meta = PostgresMeta(schema=repo.schema_name)
    reconciler = SchemaReconciler(repo, meta, log_statements=defaults.reconcile.log_statements)

    print("=" * 70)
    print("Schema Reconciliation")
    print("=" * 70)
    print(f"Target: {defaults.database.safe_description() if not args.connection else 'from --connection'}")
    print(f"Schema: {meta.schema or 'current_schema()'}")
    print(f"Tables: {', '.join(d.name for d in definitions)}")
    print(f"Mode: {'DRY RUN' if dry_run else 'EXECUTE'}")
    print("=" * 70)

    try:
        report = reconciler.reconcile_all(definitions, dry_run=dry_run, atomic=args.atomic)
    finally:
        repo.close()

    print("\n[RESULTS]\n")
    for step in report.steps:
        marker = {"success": "OK  ", "failed": "FAIL", "skipped": "SKIP", "rolled_back": "UNDO"}.get(step.status, "??  ")
        print(f"{marker} {step.name}: {step.message}")
        if step.error:
            print(f"     Error: {step.error}")
        if dry_run or args.verbose:
            for statement in step.details.get("statements", []):
                print(f"     {statement};")

    print("\n" + "=" * 70)
    if report.success:
        print("Reconciliation completed successfully")
    else:
        print("Reconciliation failed")
        for error in report.errors:
            print(f"   - {error}")
        sys.exit(1)
    print("=" * 70)


if __name__ == "__main__":
    main()
