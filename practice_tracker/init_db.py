#!/usr/bin/env python3
"""
Database initialization script.
Run this to create all database tables and seed the default admin account.
"""

import sys
import traceback

from sqlmodel import text


def main():
    """Initialize the database schema."""
    try:
        from practice_tracker.configs import settings
        from practice_tracker.configs.database import engine, init_db

        print("🗃️  Initializing database schema...")
        print(f"🔌 Testing database connection ({engine.url.render_as_string(hide_password=True)})...")

        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            print("✅ Database connection successful!")

        init_db()

        print("✅ Database schema created successfully!")
        if settings.DEFAULT_ADMIN_USERNAME:
            print(f"👤 Default admin account: {settings.DEFAULT_ADMIN_USERNAME}")
        print("🎉 Database initialization complete!")

    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        print(f"📊 Error type: {type(e).__name__}")

        print("\n📋 Full error traceback:")
        traceback.print_exc()

        sys.exit(1)


if __name__ == "__main__":
    main()
