#!/usr/bin/env python3
"""Quick script to check that the fixture tables exist in the configured database"""

import sys

from sqlalchemy import inspect

from fixture_app.database import engine as default_engine

REQUIRED_TABLES = {
    "tournament": [],
    "tournamentcategory": ["kickoff_time", "enabled", "promotional"],
    "club": [],
    "zone": ["status", "locked_at", "fixture_seed", "fixture_double_round"],
    "clubzone": [],
    "match": ["matchday", "leg", "home_club_id", "away_club_id", "status"],
    "matchcategory": ["kickoff_time", "counts_for_general"],
    "zonematchday": ["matchday", "status", "played_at"],
}


def find_schema_problems(engine=None):
    """Missing tables or columns, empty when the schema is up to date"""
    inspector = inspect(engine or default_engine)
    existing_tables = set(inspector.get_table_names())

    problems = []
    for table, columns in REQUIRED_TABLES.items():
        if table not in existing_tables:
            problems.append(f"{table} MISSING")
            continue
        present = {c["name"] for c in inspector.get_columns(table)}
        for column in columns:
            if column not in present:
                problems.append(f"{table}.{column} MISSING")
    return problems


if __name__ == "__main__":
    print(f"Database: {default_engine.url}")
    problems = find_schema_problems()
    for problem in problems:
        print(f"✗ {problem}")
    if problems:
        print("Run migrations with: alembic upgrade head")
        sys.exit(1)
    print("All required fixture tables exist!")
