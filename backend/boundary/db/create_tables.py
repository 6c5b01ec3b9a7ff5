"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, backend.configs
System role: Database schema initialization

Usage:
    python -m backend.boundary.db.create_tables
    python -m backend.boundary.db.create_tables --drop
"""

import argparse
import asyncio

from backend.boundary.db.connection import DatabaseConnection
from backend.configs import get_settings


async def create_all_tables() -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: calls CREATE TABLE IF NOT EXISTS for each model, so safe
    to run multiple times. Existing tables remain unchanged.

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    database = DatabaseConnection(get_settings().database)
    await database.connect()
    try:
        await database.create_tables()
        print("All tables created successfully.")
    finally:
        await database.dispose()


async def drop_all_tables() -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.

    Raises:
        SQLAlchemyError: If database connection fails or drop fails
    """
    database = DatabaseConnection(get_settings().database)
    await database.connect()
    try:
        await database.drop_tables()
        print("All tables dropped successfully.")
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or drop database tables")
    parser.add_argument("--drop", action="store_true", help="Drop all tables first")
    args = parser.parse_args()

    if args.drop:
        asyncio.run(drop_all_tables())
    asyncio.run(create_all_tables())
