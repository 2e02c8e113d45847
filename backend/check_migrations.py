#!/usr/bin/env python3
"""Check that the matching tables and their one-per-event constraints exist"""

import sys

from sqlalchemy import inspect

from dinner_circles.database import engine

REQUIRED_TABLES = ["app_user", "event", "matching_opt_in", "circle", "circle_member"]

# table -> unique constraint the matching engine depends on
REQUIRED_UNIQUE = {
    "matching_opt_in": "uq_opt_in_event_user",
    "circle_member": "uq_circle_member_event_user",
}


def check_schema() -> bool:
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())

    print(f"Database: {engine.url}")
    print()

    problems = []
    for table in REQUIRED_TABLES:
        if table not in existing_tables:
            print(f"✗ {table} MISSING")
            problems.append(table)
            continue

        constraint = REQUIRED_UNIQUE.get(table)
        if constraint:
            names = {uc.get("name") for uc in inspector.get_unique_constraints(table)}
            if constraint not in names:
                print(f"✗ {table} exists but lacks {constraint}")
                problems.append(f"{table}.{constraint}")
                continue

        print(f"✓ {table}")

    print()
    if problems:
        print(f"ERROR: {len(problems)} schema problem(s) detected")
        print("Run migrations with: alembic upgrade head")
        return False

    print("Schema OK")
    return True


if __name__ == "__main__":
    try:
        sys.exit(0 if check_schema() else 1)
    except Exception as e:
        print(f"Error checking schema: {e}")
        import traceback

        traceback.print_exc()
        sys.exit(1)
