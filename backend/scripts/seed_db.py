"""CLI script to create the schema and load reference data into the backend DB.
Usage: python scripts/seed_db.py [--database-url URL] [--schema-only]
"""
import sys
import argparse
import logging
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `upskilling` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from upskilling.config import settings
from upskilling.database import Database
from upskilling.seed import seed


def main(database_url: Optional[str] = None, schema_only: bool = False):
    """Create all tables and, unless `schema_only`, seed empty tables.

    Results are printed to stdout for a quick CLI feedback loop.
    """
    db = Database(database_url or settings.DATABASE_URL)
    print('Using database:', db.engine.url.render_as_string(hide_password=True))
    try:
        db.create_all()
        print('Tables created.')
        if schema_only:
            return
        with db.session() as session:
            counts = seed(session)
        for table, created in counts.items():
            print(f'{table}: {created} rows inserted')
    finally:
        db.dispose()


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--database-url', help='Override DATABASE_URL for this run')
    parser.add_argument('--schema-only', action='store_true', help='Create tables without seeding')
    args = parser.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL)
    main(database_url=args.database_url, schema_only=args.schema_only)
