"""
Initialize database schema.

Run ONCE when:
- first local setup
- new environment deployment

Creates missing tables and, unless --no-seed is given, a few research
fields so papers can be uploaded right away.
"""

import argparse
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
from papertrove.config import Config
from papertrove.database.db.session import Database
from papertrove.database.field_repository import FieldRepository

DEFAULT_FIELDS = [
    ("Computer Science", "Algorithms, systems and software"),
    ("Mathematics", "Pure and applied mathematics"),
    ("Physics", "Theoretical and experimental physics"),
    ("Biology", "Life sciences"),
]


def init_db(database_url: str = None, seed: bool = True) -> int:
    """Returns the number of fields created"""
    database = Database(database_url or Config.database_url)
    try:
        print("🔧 Initializing database schema...")
        database.create_all()

        created = 0
        if seed:
            with database.transaction() as db:
                fields = FieldRepository(db)
                for name, description in DEFAULT_FIELDS:
                    if not fields.get_by_name(name):
                        fields.add(name, description)
                        created += 1
        print(f"✅ Database schema initialized ({created} fields added).")
        return created
    finally:
        database.close()


def main():
    parser = argparse.ArgumentParser(description="Initialize the PaperTrove database")
    parser.add_argument("--database-url", default=None)
    parser.add_argument("--no-seed", dest="seed", action="store_false")
    args = parser.parse_args()
    init_db(args.database_url, seed=args.seed)


if __name__ == "__main__":
    main()
