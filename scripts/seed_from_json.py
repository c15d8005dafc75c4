#!/usr/bin/env python3
"""
Seed the matchscore database from a JSON fixture.

The fixture maps table names (candidates, jobs, skill_taxonomy,
matching_config, submissions) to lists of rows. Rows with an existing
primary key are replaced, so give taxonomy and config rows explicit ids
to keep re-runs idempotent.

Usage:
    python scripts/seed_from_json.py --json data/fixture.json --db data/matchscore.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from matchscore.database import init_database
from matchscore.repository import import_records


def seed(json_path: Path, db_path: Path, dry_run: bool = False) -> bool:
    print(f"Loading fixture from {json_path}...")
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    if dry_run:
        print("\n[DRY RUN] Would import:")
        for table, rows in data.items():
            print(f"  {table}: {len(rows)} rows")
        return True

    print(f"\nInitializing database at {db_path}...")
    init_database(db_path)

    try:
        counts = import_records(db_path, data)
    except Exception as e:
        print(f"❌ Failed to import: {e}")
        return False

    print("\n✅ Seed complete!")
    for table, count in counts.items():
        print(f"   {table}: {count}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Seed the matchscore database from JSON")
    parser.add_argument("--json", type=Path, required=True,
                        help="Path to JSON fixture file")
    parser.add_argument("--db", type=Path, default=Path("data/matchscore.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be imported without writing")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    sys.exit(0 if seed(args.json, args.db, dry_run=args.dry_run) else 1)


if __name__ == "__main__":
    main()
