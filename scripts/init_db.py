#!/usr/bin/env python3
"""
Initialize the finance tracker SQLite database.

Run this script to create the schema at the db_path from the app config
(FINANCE_TRACKER_DATA_DIR moves it). Safe to run more than once.
"""
from finance_tracker.config.settings import ConfigLoader
from finance_tracker.database.connection import SCHEMA_PATH, DatabaseConfig, DatabaseManager

def main():
    """initialize the database."""
    config = DatabaseConfig(ConfigLoader.load_app_config()["db_path"])
    print(f"Initializing database at: {config.db_path}")
    print(f"Executing schema from: {SCHEMA_PATH}")

    with DatabaseManager(config) as db:
        db.initialize()
        version = db.schema_version()

    if version is not None:
        print(f"✓ Database initialized successfully!")
        print(f"  Schema version: {version}")
    else:
        print("✗ Database initialization may have failed")

if __name__ == "__main__":
    main()
