"""
Initialize database — creates the branch_data and expected_attendance tables.
Run once before first launch with STORAGE_BACKEND=database.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text
from app.config import settings
from app.database import Base, create_tables, get_engine
from app.errors import ConfigurationError


def main():
    print("🗄️  Gym Occupancy Tracker DB Initialization")
    print("=" * 40)

    try:
        engine = get_engine()
    except ConfigurationError as e:
        print(f"❌ {e}")
        sys.exit(1)
    print(f"📡 Database: {engine.url.render_as_string(hide_password=True)}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        if settings.INSTANCE_CONNECTION_NAME and not settings.PRIVATE_IP:
            print(f"\nExpected Cloud SQL socket at /cloudsql/{settings.INSTANCE_CONNECTION_NAME}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables(engine)

    tables = [t for t in inspect(engine).get_table_names() if t in Base.metadata.tables]
    print(f"\n📊 Tracker tables in database ({len(tables)} total):")
    for t in sorted(tables):
        print(f"   ✓ {t}")

    print("\n🎉 Database ready! Start the backend with STORAGE_BACKEND=database:")
    print("   python -m app")


if __name__ == "__main__":
    main()
