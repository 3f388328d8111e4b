#!/usr/bin/env python3
"""
Create the toi schema (and the pgvector extension) and reseed the news alias pool.
Run this once against a fresh database, or after adding models.
"""

import sys
from pathlib import Path

from sqlalchemy import inspect

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from toi.config import DATABASE_URL
from toi.database import create_db_engine, create_session_factory, init_db
from toi.services.news import load_alias_names, seed_aliases


def migrate():
    engine = create_db_engine(DATABASE_URL)
    print(f"Initializing {engine.dialect.name} database with all models...")
    init_db(engine)
    print("✓ Database initialized successfully")

    names = load_alias_names()
    seed_aliases(create_session_factory(engine), names)
    print(f"✓ Seeded {len(names)} news aliases")

    tables = sorted(inspect(engine).get_table_names())
    print("Tables: " + ", ".join(tables))
    engine.dispose()


if __name__ == "__main__":
    migrate()
