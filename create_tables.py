# create_tables.py
import argparse
from app.database import Base, engine, DATABASE_URL
from app import models  # noqa: F401  registers every table on Base.metadata


def create_tables(drop_existing: bool = False):
    """Create all tables, optionally dropping the existing ones first"""
    try:
        if drop_existing:
            # metadata knows the foreign key order, tasks and memberships go first
            Base.metadata.drop_all(bind=engine)
            print("🗑️  Dropped existing tables")

        Base.metadata.create_all(bind=engine)
        print(f"✅ All tables created successfully on {engine.url.render_as_string(hide_password=True)}")
        return True

    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the team task manager schema")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    print(f"Database: {DATABASE_URL.split('@')[-1]}")
    raise SystemExit(0 if create_tables(drop_existing=args.drop) else 1)
