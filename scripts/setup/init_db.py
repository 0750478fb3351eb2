# scripts/setup/init_db.py
"""
Initialize database: creates all tables and the job number counter.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from mobile_service.database import SessionLocal, create_tables, engine
from mobile_service.config import settings
from mobile_service.services.job_counter import DatabaseJobCounter
from sqlalchemy import inspect, text


def main():
    print("Mobile Service DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        print("\nCheck DATABASE_URL in .env")
        sys.exit(1)

    print("\nCreating tables...")
    create_tables()

    db = SessionLocal()
    try:
        DatabaseJobCounter().ensure_row(db)
    finally:
        db.close()
    print("All tables created, job counter ready")

    tables = sorted(inspect(engine).get_table_names())
    print(f"\nTables in database ({len(tables)} total):")
    for t in tables:
        print(f"   - {t}")

    print("\nDatabase ready! You can now start the backend:")
    print(f"   uvicorn mobile_service.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
